"""Unit tests for the skill catalogue loader and hierarchy queries.

Tests SkillCatalogue against the shipped skill_catalogue.json config.
"""

import pytest
from pathlib import Path

from skillmatrix.skills.catalogue import SkillCatalogue


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def minimal() -> SkillCatalogue:
    """Deeply nested subcategories for edge-case testing."""
    return SkillCatalogue.from_dict({
        "categories": [{"id": "c1", "name": "One"}],
        "subcategories": [
            {"id": "s1", "categoryId": "c1", "name": "Root"},
            {"id": "s2", "categoryId": "", "parentSubCategoryId": "s1", "name": "Child"},
            {"id": "s3", "parentSubCategoryId": "s2", "name": "Grandchild"},
            {"id": "s4", "name": "Floating"},
        ],
        "skills": [
            {"id": "k1", "subCategoryId": "s1", "name": "K1"},
            {"id": "k2", "subCategoryId": "s2", "name": "K2"},
            {"id": "k3", "subCategoryId": "s3", "name": "K3"},
            {"id": "k4", "subCategoryId": "s4", "name": "K4"},
        ],
    })


# ===================================================================
# Loading and validation
# ===================================================================

class TestCatalogueLoading:
    def test_loads_from_config_dir(self) -> None:
        catalogue = SkillCatalogue.from_config_dir(CONFIG_DIR)
        assert catalogue.category_count() == 3
        assert catalogue.skill_count() == 7

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Skill catalogue not found"):
            SkillCatalogue.from_config_dir(tmp_path)

    def test_missing_section(self) -> None:
        with pytest.raises(ValueError, match="missing 'skills'"):
            SkillCatalogue.from_dict({"categories": [], "subcategories": []})

    def test_nesting_cycle_rejected(self) -> None:
        with pytest.raises(ValueError, match="cycle"):
            SkillCatalogue.from_dict({
                "categories": [],
                "subcategories": [
                    {"id": "a", "parentSubCategoryId": "b", "name": "A"},
                    {"id": "b", "parentSubCategoryId": "a", "name": "B"},
                ],
                "skills": [],
            })

    def test_to_dict_round_trip(self, minimal: SkillCatalogue) -> None:
        again = SkillCatalogue.from_dict(minimal.to_dict())
        assert again.skills() == minimal.skills()
        assert again.subcategories() == minimal.subcategories()


# ===================================================================
# Hierarchy queries
# ===================================================================

class TestHierarchy:
    def test_category_includes_nested(self, minimal: SkillCatalogue) -> None:
        assert minimal.skill_ids_for_category("c1") == {"k1", "k2", "k3"}

    def test_subcategory_recursive(self, minimal: SkillCatalogue) -> None:
        assert minimal.skill_ids_for_subcategory("s2") == {"k2", "k3"}
        assert minimal.skill_ids_for_subcategory("s3") == {"k3"}

    def test_category_of_nested_skill(self, minimal: SkillCatalogue) -> None:
        assert minimal.category_of_skill("k3").category_id == "c1"

    def test_floating_subcategory_has_no_category(self, minimal: SkillCatalogue) -> None:
        assert minimal.category_of_skill("k4") is None

    def test_unknown_skill(self, minimal: SkillCatalogue) -> None:
        assert minimal.category_of_skill("nope") is None
        assert not minimal.has_skill("nope")
        assert minimal.skill_name("nope") == "nope"

    def test_shipped_cnc_is_production(self) -> None:
        catalogue = SkillCatalogue.from_config_dir(CONFIG_DIR)
        assert catalogue.category_of_skill("skill-cnc-programming").name == "Production"
