"""Skill catalogue — loads, validates, and queries the category hierarchy.

The catalogue is category → subcategory (optionally nested) → skill.
Every skill resolves to exactly one category through its subcategory
chain.

Usage:
    catalogue = SkillCatalogue.from_config_dir(Path("config"))
    skill_ids = catalogue.skill_ids_for_category("cat-production")
    category = catalogue.category_of_skill("skill-welding")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Optional

from skillmatrix.models.skill import Category, Skill, SubCategory


class SkillCatalogue:
    """The static catalogue of categories, subcategories and skills.

    Lookups are precomputed on construction. Subcategory cycles are
    rejected; a dangling parent reference makes the subcategory a root.
    """

    CATALOGUE_FILENAME = "skill_catalogue.json"

    def __init__(
        self,
        categories: Iterable[Category],
        subcategories: Iterable[SubCategory],
        skills: Iterable[Skill],
    ) -> None:
        self._categories: dict[str, Category] = {c.category_id: c for c in categories}
        self._subcategories: dict[str, SubCategory] = {
            s.subcategory_id: s for s in subcategories
        }
        self._skills: dict[str, Skill] = {s.skill_id: s for s in skills}
        self._subcategory_category: dict[str, Optional[str]] = {}
        self._validate()

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> SkillCatalogue:
        """Load the catalogue from skill_catalogue.json.

        Raises:
            FileNotFoundError: If skill_catalogue.json does not exist.
            ValueError: If the catalogue is structurally invalid.
        """
        path = config_dir / cls.CATALOGUE_FILENAME
        if not path.exists():
            raise FileNotFoundError(f"Skill catalogue not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillCatalogue:
        for key in ("categories", "subcategories", "skills"):
            if key not in data:
                raise ValueError(f"Skill catalogue missing '{key}' field")
        categories = [
            Category(
                category_id=c["id"],
                name=c["name"],
                description=c.get("description", ""),
            )
            for c in data["categories"]
        ]
        subcategories = [
            SubCategory(
                subcategory_id=s["id"],
                category_id=s.get("categoryId", ""),
                name=s["name"],
                parent_subcategory_id=s.get("parentSubCategoryId"),
                description=s.get("description", ""),
            )
            for s in data["subcategories"]
        ]
        skills = [
            Skill(
                skill_id=s["id"],
                subcategory_id=s["subCategoryId"],
                name=s["name"],
                description=s.get("description", ""),
            )
            for s in data["skills"]
        ]
        return cls(categories, subcategories, skills)

    def to_dict(self) -> dict[str, Any]:
        return {
            "categories": [
                {"id": c.category_id, "name": c.name, "description": c.description}
                for c in self._categories.values()
            ],
            "subcategories": [
                {
                    "id": s.subcategory_id,
                    "categoryId": s.category_id,
                    "parentSubCategoryId": s.parent_subcategory_id,
                    "name": s.name,
                    "description": s.description,
                }
                for s in self._subcategories.values()
            ],
            "skills": [
                {
                    "id": s.skill_id,
                    "subCategoryId": s.subcategory_id,
                    "name": s.name,
                    "description": s.description,
                }
                for s in self._skills.values()
            ],
        }

    def _validate(self) -> None:
        """Resolve every subcategory to its category.

        Raises:
            ValueError: If subcategory nesting contains a cycle.
        """
        for sub_id in self._subcategories:
            chain: list[str] = []
            current: Optional[SubCategory] = self._subcategories[sub_id]
            category_id: Optional[str] = None
            while current is not None:
                if current.subcategory_id in chain:
                    raise ValueError(
                        f"Subcategory nesting cycle: "
                        f"{' -> '.join(chain + [current.subcategory_id])}"
                    )
                chain.append(current.subcategory_id)
                if current.category_id:
                    category_id = current.category_id
                    break
                parent_id = current.parent_subcategory_id
                current = self._subcategories.get(parent_id) if parent_id else None
            self._subcategory_category[sub_id] = category_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def categories(self) -> list[Category]:
        """All categories, in insertion order."""
        return list(self._categories.values())

    def subcategories(self) -> list[SubCategory]:
        return list(self._subcategories.values())

    def skills(self) -> list[Skill]:
        return list(self._skills.values())

    def has_skill(self, skill_id: str) -> bool:
        return skill_id in self._skills

    def skill(self, skill_id: str) -> Optional[Skill]:
        return self._skills.get(skill_id)

    def skill_name(self, skill_id: str) -> str:
        """Skill display name; falls back to the id for unknown skills."""
        skill = self._skills.get(skill_id)
        return skill.name if skill is not None else skill_id

    def category(self, category_id: str) -> Optional[Category]:
        return self._categories.get(category_id)

    def category_of_skill(self, skill_id: str) -> Optional[Category]:
        """The category a skill belongs to, via its subcategory chain."""
        skill = self._skills.get(skill_id)
        if skill is None:
            return None
        category_id = self._subcategory_category.get(skill.subcategory_id)
        if category_id is None:
            return None
        return self._categories.get(category_id)

    def skill_ids_for_category(self, category_id: str) -> set[str]:
        """All skill ids in a category, including nested subcategories."""
        sub_ids = {
            sub_id for sub_id, cat_id in self._subcategory_category.items()
            if cat_id == category_id
        }
        return {s.skill_id for s in self._skills.values() if s.subcategory_id in sub_ids}

    def skill_ids_for_subcategory(self, subcategory_id: str) -> set[str]:
        """Skill ids directly in a subcategory and in all of its descendants."""
        result: set[str] = set()
        pending = [subcategory_id]
        seen: set[str] = set()
        while pending:
            sub_id = pending.pop()
            if sub_id in seen:
                continue
            seen.add(sub_id)
            result.update(
                s.skill_id for s in self._skills.values() if s.subcategory_id == sub_id
            )
            pending.extend(
                s.subcategory_id for s in self._subcategories.values()
                if s.parent_subcategory_id == sub_id
            )
        return result

    def skill_count(self) -> int:
        return len(self._skills)

    def category_count(self) -> int:
        return len(self._categories)
