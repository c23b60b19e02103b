"""Tests for effective target resolution through role inheritance."""

import pytest

from skillmatrix.models.assessment import Assessment
from skillmatrix.models.organization import Employee, EmployeeRole, RoleRequirement
from skillmatrix.projection.targets import RoleInheritanceError, TargetResolver


@pytest.fixture
def targets(roles, assessments) -> TargetResolver:
    return TargetResolver(roles, assessments)


class TestRoleLookup:
    def test_by_id(self, targets: TargetResolver) -> None:
        assert targets.find_role("role-senior").name == "Senior Operator"

    def test_by_name_case_insensitive(self, targets: TargetResolver) -> None:
        assert targets.find_role("  senior operator ").role_id == "role-senior"

    def test_unknown(self, targets: TargetResolver) -> None:
        assert targets.find_role("Astronaut") is None
        assert targets.find_role(None) is None

    def test_chain_nearest_first(self, targets: TargetResolver) -> None:
        chain = targets.role_chain("role-senior")
        assert [r.role_id for r in chain] == ["role-senior", "role-operator"]

    def test_dangling_parent_is_root(self) -> None:
        role = EmployeeRole("r1", "Orphan", inherits_from_id="gone")
        targets = TargetResolver([role], [])
        assert [r.role_id for r in targets.role_chain("r1")] == ["r1"]


class TestEffectiveTarget:
    def test_role_beats_lower_override(self) -> None:
        """Role requires 75, individual override is 50: target is 75."""
        role = EmployeeRole("R", "R", required_skills=(RoleRequirement("S1", 75),))
        employee = Employee("E", roles=("R",))
        targets = TargetResolver([role], [Assessment("E", "S1", 25, target_level=50)])
        assert targets.effective_target(employee, "S1") == 75

    def test_override_beats_lower_role(self, targets, employees) -> None:
        cara = employees[2]
        assert targets.effective_target(cara, "skill-measuring") == 100

    def test_inherited_requirement(self, targets, employees) -> None:
        anna = employees[0]
        assert targets.effective_target(anna, "skill-first-aid") == 25

    def test_child_and_parent_take_max(self, targets, employees) -> None:
        anna = employees[0]
        assert targets.effective_target(anna, "skill-turning") == 75

    def test_no_target_is_zero(self, targets, employees) -> None:
        anna = employees[0]
        assert targets.effective_target(anna, "skill-welding") == 0

    def test_multiple_roles(self, roles) -> None:
        employee = Employee("E", roles=("Machine Operator", "Inspector"))
        targets = TargetResolver(roles, [])
        assert targets.effective_target(employee, "skill-turning") == 50
        assert targets.effective_target(employee, "skill-measuring") == 75

    def test_required_skills(self, targets, employees) -> None:
        anna = employees[0]
        assert targets.required_skills(anna) == {
            "skill-turning": 75,
            "skill-cnc-programming": 50,
            "skill-first-aid": 25,
        }


class TestCycles:
    def test_cycle_fails_fast(self) -> None:
        roles = [
            EmployeeRole("a", "A", inherits_from_id="b"),
            EmployeeRole("b", "B", inherits_from_id="a"),
        ]
        targets = TargetResolver(roles, [])
        with pytest.raises(RoleInheritanceError, match="Circular role inheritance"):
            targets.effective_target(Employee("E", roles=("a",)), "S1")

    def test_self_reference(self) -> None:
        targets = TargetResolver([EmployeeRole("a", "A", inherits_from_id="a")], [])
        with pytest.raises(RoleInheritanceError):
            targets.role_chain("a")

    def test_is_value_error(self) -> None:
        assert issubclass(RoleInheritanceError, ValueError)
