"""Skill gap analysis and per-employee metrics.

A gap is a skill where the employee's required level (individual target,
or the requirements of a target role and its ancestors) exceeds the
current level. N/A (-1) counts as 0 for gap purposes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from skillmatrix.models.organization import Employee
from skillmatrix.models.snapshot import OrganizationSnapshot
from skillmatrix.policy.resolver import PolicyResolver
from skillmatrix.projection.fulfillment import round_half_up
from skillmatrix.projection.targets import TargetResolver
from skillmatrix.skills.catalogue import SkillCatalogue


@dataclass(frozen=True)
class SkillGap:
    skill_id: str
    skill_name: str
    category_id: Optional[str]
    category_name: Optional[str]
    current_level: int
    target_level: int
    gap: int


@dataclass(frozen=True)
class EmployeeMetrics:
    """Profile figures for one employee."""
    employee_id: str
    active_skill_count: int
    total_xp: int
    fulfillment: Optional[int]
    top_skills: list[dict[str, Any]] = field(default_factory=list)
    learning_needs: list[dict[str, Any]] = field(default_factory=list)
    active_measure_count: int = 0
    has_active_plan: bool = False
    has_deficits: bool = False
    is_plan_enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SkillGapAnalyzer:
    """Computes gaps and profile metrics from a snapshot.

    Usage:
        analyzer = SkillGapAnalyzer(resolver, snapshot)
        gaps = analyzer.skill_gaps("emp-1", target_role_ref="Senior welder")
        metrics = analyzer.employee_metrics("emp-1")
    """

    def __init__(self, resolver: PolicyResolver, snapshot: OrganizationSnapshot) -> None:
        self._resolver = resolver
        self._snapshot = snapshot
        self._catalogue = SkillCatalogue(
            snapshot.categories, snapshot.subcategories, snapshot.skills,
        )
        self._targets = TargetResolver(snapshot.roles, snapshot.assessments)
        self._employees: dict[str, Employee] = {
            e.employee_id: e for e in snapshot.employees
        }

    def _levels_for(self, employee_id: str) -> dict[str, int]:
        return {
            a.skill_id: a.level for a in self._snapshot.assessments
            if a.employee_id == employee_id
        }

    def skill_gaps(
        self,
        employee_id: str,
        target_role_ref: Optional[str] = None,
    ) -> list[SkillGap]:
        """Skills where the required level exceeds the current level.

        Without a target role, the employee's own roles are used.
        Returns an empty list for unknown employees.
        Largest gaps first.

        Raises:
            RoleInheritanceError: If the role chain loops.
        """
        employee = self._employees.get(employee_id)
        if employee is None:
            return []

        required: dict[str, int] = {}
        for a in self._snapshot.assessments:
            if a.employee_id == employee_id and a.target_level and a.target_level > 0:
                required[a.skill_id] = a.target_level

        if target_role_ref is not None:
            role_requirements = self._targets.requirements_for_role(target_role_ref)
        else:
            role_requirements = self._targets.required_skills(employee)
        for skill_id, level in role_requirements.items():
            required[skill_id] = max(required.get(skill_id, 0), level)

        levels = self._levels_for(employee_id)
        gaps: list[SkillGap] = []
        for skill_id, target in required.items():
            skill = self._catalogue.skill(skill_id)
            if skill is None:
                continue
            current = max(0, levels.get(skill_id, 0))
            if target - current <= 0:
                continue
            category = self._catalogue.category_of_skill(skill_id)
            gaps.append(SkillGap(
                skill_id=skill_id,
                skill_name=skill.name,
                category_id=category.category_id if category else None,
                category_name=category.name if category else None,
                current_level=current,
                target_level=target,
                gap=target - current,
            ))
        gaps.sort(key=lambda g: g.gap, reverse=True)
        return gaps

    def employee_metrics(self, employee_id: str) -> Optional[EmployeeMetrics]:
        """Skill breadth, XP, Soll fulfillment and plan status of an employee."""
        employee = self._employees.get(employee_id)
        if employee is None:
            return None
        params = self._resolver.dashboard_params()
        levels = {
            skill_id: level for skill_id, level in self._levels_for(employee_id).items()
            if self._catalogue.has_skill(skill_id)
        }

        rated = {s: lvl for s, lvl in levels.items() if lvl > 0}
        total_xp = sum(rated.values())

        total_target = 0
        total_actual = 0
        needs = []
        for skill in self._catalogue.skills():
            target = self._targets.effective_target(employee, skill.skill_id)
            if target <= 0:
                continue
            level = max(0, levels.get(skill.skill_id, 0))
            total_target += target
            total_actual += level
            if level < target:
                needs.append({
                    "skill_id": skill.skill_id,
                    "skill_name": skill.name,
                    "level": level,
                    "target": target,
                    "gap": level - target,
                })
        fulfillment = (
            round_half_up(total_actual / total_target * 100) if total_target > 0 else None
        )
        needs.sort(key=lambda n: n["gap"])

        top = sorted(rated.items(), key=lambda item: item[1], reverse=True)
        top_skills = [
            {"skill_id": s, "skill_name": self._catalogue.skill_name(s), "level": lvl}
            for s, lvl in top[: params["top_skill_count"]]
        ]

        own_plans = [p for p in self._snapshot.plans if p.employee_id == employee_id]
        own_plan_ids = {p.plan_id for p in own_plans}
        planned_statuses = self._resolver.planned_measure_statuses()
        active_measures = [
            m for m in self._snapshot.measures
            if m.plan_id in own_plan_ids and m.status in planned_statuses
        ]
        active_plan_statuses = self._resolver.active_plan_statuses()
        has_active_plan = any(p.status in active_plan_statuses for p in own_plans)
        has_deficits = bool(needs)

        return EmployeeMetrics(
            employee_id=employee_id,
            active_skill_count=len(rated),
            total_xp=total_xp,
            fulfillment=fulfillment,
            top_skills=top_skills,
            learning_needs=needs[: params["learning_need_count"]],
            active_measure_count=len(active_measures),
            has_active_plan=has_active_plan,
            has_deficits=has_deficits,
            is_plan_enabled=has_deficits or has_active_plan,
        )
