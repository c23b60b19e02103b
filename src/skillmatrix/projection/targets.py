"""Target resolver — computes the effective required proficiency ("Soll").

effective_target = max(individual override, highest role requirement)

The role requirement is the maximum level declared for the skill by any
role the employee holds or by any ancestor of those roles
(inherits_from_id chain). A result of 0 means "no Soll defined" and
callers must treat it as absent, not as "fully achieved at zero".

Key rules:
- Roles are looked up by id, or by trimmed case-insensitive name (legacy
  data stores role names on employees).
- A parent reference that does not resolve ends the walk (role is a root).
- Revisiting a role during the walk is a configuration error.
- Pure computation — no side effects.
"""

from __future__ import annotations

from typing import Iterable, Optional

from skillmatrix.models.assessment import Assessment, PairKey
from skillmatrix.models.organization import Employee, EmployeeRole


class RoleInheritanceError(ValueError):
    """Raised when role inheritance contains a cycle."""


class TargetResolver:
    """Resolves effective targets for (employee, skill) pairs.

    Usage:
        resolver = TargetResolver(roles, assessments)
        target = resolver.effective_target(employee, "skill-welding")

    Results are memoised per pair; the inputs are treated as an
    immutable snapshot.
    """

    def __init__(
        self,
        roles: Iterable[EmployeeRole],
        assessments: Iterable[Assessment],
    ) -> None:
        self._roles = list(roles)
        self._roles_by_id = {r.role_id: r for r in self._roles}
        self._roles_by_name: dict[str, EmployeeRole] = {}
        for role in self._roles:
            # First role wins on duplicate names
            self._roles_by_name.setdefault(role.name.strip().lower(), role)
        self._individual: dict[PairKey, int] = {
            a.key: a.target_level or 0 for a in assessments
        }
        self._chains: dict[str, list[EmployeeRole]] = {}
        self._cache: dict[PairKey, int] = {}

    def find_role(self, ref: Optional[str]) -> Optional[EmployeeRole]:
        """Resolve a role reference by id, falling back to its name."""
        if not ref:
            return None
        role = self._roles_by_id.get(ref)
        if role is not None:
            return role
        return self._roles_by_name.get(ref.strip().lower())

    def role_chain(self, ref: str) -> list[EmployeeRole]:
        """The role followed by all of its ancestors, nearest first.

        Raises:
            RoleInheritanceError: If the inheritance chain loops.
        """
        start = self.find_role(ref)
        if start is None:
            return []
        cached = self._chains.get(start.role_id)
        if cached is not None:
            return cached

        chain: list[EmployeeRole] = []
        visited: set[str] = set()
        current: Optional[EmployeeRole] = start
        while current is not None:
            if current.role_id in visited:
                names = " -> ".join(r.name for r in chain)
                raise RoleInheritanceError(
                    f"Circular role inheritance: {names} -> {current.name}"
                )
            visited.add(current.role_id)
            chain.append(current)
            current = self.find_role(current.inherits_from_id)

        self._chains[start.role_id] = chain
        return chain

    def role_target(self, role_refs: Iterable[str], skill_id: str) -> int:
        """Highest requirement for a skill across roles and their ancestors."""
        best = 0
        for ref in role_refs:
            for role in self.role_chain(ref):
                level = role.requirement_for(skill_id)
                if level is not None and level > best:
                    best = level
        return best

    def individual_target(self, employee_id: str, skill_id: str) -> int:
        return self._individual.get((employee_id, skill_id), 0)

    def effective_target(self, employee: Employee, skill_id: str) -> int:
        """Effective Soll for a pair; 0 means no target is defined."""
        key = (employee.employee_id, skill_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        individual = self._individual.get(key, 0)
        target = max(individual, self.role_target(employee.roles, skill_id))
        self._cache[key] = target
        return target

    def requirements_for_role(self, ref: str) -> dict[str, int]:
        """Merged requirements of a role and its ancestors (max per skill)."""
        merged: dict[str, int] = {}
        for role in self.role_chain(ref):
            for req in role.required_skills:
                if req.level > merged.get(req.skill_id, 0):
                    merged[req.skill_id] = req.level
                else:
                    merged.setdefault(req.skill_id, req.level)
        return merged

    def required_skills(self, employee: Employee) -> dict[str, int]:
        """All role-derived requirements of an employee (max per skill)."""
        merged: dict[str, int] = {}
        for ref in employee.roles:
            for skill_id, level in self.requirements_for_role(ref).items():
                if level > merged.get(skill_id, 0):
                    merged[skill_id] = level
                else:
                    merged.setdefault(skill_id, level)
        return merged
