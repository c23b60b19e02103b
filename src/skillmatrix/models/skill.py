"""Skill catalogue models and the proficiency level scale.

The catalogue is a three-level structure:
- Category (broad area, e.g. "Production")
- SubCategory (may be nested under another subcategory)
- Skill (a concrete capability that employees are assessed on)

Proficiency is expressed on a fixed five-step scale plus a sentinel:
    -1 = not applicable / not assessed (excluded from every average)
     0, 25, 50, 75, 100 = proficiency in percent
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

NOT_ASSESSED = -1
VALID_LEVELS: tuple[int, ...] = (-1, 0, 25, 50, 75, 100)
REQUIREMENT_LEVELS: tuple[int, ...] = (0, 25, 50, 75, 100)


@dataclass(frozen=True)
class SkillLevel:
    """One step of the proficiency scale."""
    value: int
    label: str
    title: str
    description: str


# Order matches the matrix cell toggle: 0 -> N/A -> 25 -> ... -> 100 -> 0
LEVELS: tuple[SkillLevel, ...] = (
    SkillLevel(0, "0%", "No knowledge", "No experience or training so far."),
    SkillLevel(-1, "N/A", "Not applicable", "Ignored in every calculation."),
    SkillLevel(25, "25%", "Basic knowledge", "Theoretically familiar; first contact."),
    SkillLevel(50, "50%", "Practitioner", "Carries out tasks; sometimes needs support."),
    SkillLevel(75, "75%", "Proficient", "Masters the standard safely and independently."),
    SkillLevel(100, "100%", "Expert / mentor", "Solves complex problems and passes knowledge on."),
)


def level_by_value(value: int) -> Optional[SkillLevel]:
    """Look up a level definition by its numeric value."""
    for level in LEVELS:
        if level.value == value:
            return level
    return None


def next_level(current: int) -> int:
    """Return the next level in the toggle cycle.

    Unknown values restart the cycle at the first level.
    """
    values = [lvl.value for lvl in LEVELS]
    try:
        idx = values.index(current)
    except ValueError:
        idx = -1
    return values[(idx + 1) % len(values)]


def score_band(score: Optional[float]) -> str:
    """Classify a 0-100 score into a display band."""
    if score is None:
        return "none"
    if score >= 75:
        return "green"
    if score >= 50:
        return "lime"
    if score >= 25:
        return "yellow"
    if score > 0:
        return "orange"
    return "gray"


@dataclass(frozen=True)
class Category:
    """Top-level grouping of skills."""
    category_id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class SubCategory:
    """A grouping inside a category.

    Root subcategories carry their category directly. Nested subcategories
    point at a parent subcategory; their category is taken from the root
    of that chain when category_id is empty.
    """
    subcategory_id: str
    category_id: str
    name: str
    parent_subcategory_id: Optional[str] = None
    description: str = ""


@dataclass(frozen=True)
class Skill:
    """A single assessable skill."""
    skill_id: str
    subcategory_id: str
    name: str
    description: str = ""

    def __post_init__(self) -> None:
        if not self.skill_id:
            raise ValueError("skill_id must be non-empty")
