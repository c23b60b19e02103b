"""Skill catalogue — categories, nested subcategories and skills."""

from skillmatrix.skills.catalogue import SkillCatalogue

__all__ = ["SkillCatalogue"]
