"""Pseudonymisation of employee names for screen sharing and exports.

Aliases come from an explicit table owned by the caller; nothing is
kept in process-wide state, so two calls with the same table always
agree.
"""

from __future__ import annotations

from typing import Iterable, Optional

from skillmatrix.models.organization import Employee


class Pseudonymizer:
    """Maps employee ids to stable aliases.

    Usage:
        table = Pseudonymizer.build_table(employees)
        alias = Pseudonymizer(table).alias("emp-7")
    """

    def __init__(self, table: dict[str, str], prefix: str = "Employee") -> None:
        self._table = dict(table)
        self._prefix = prefix

    @staticmethod
    def build_table(employees: Iterable[Employee], prefix: str = "Employee") -> dict[str, str]:
        """Number employees in the given order: Employee 1, Employee 2, ..."""
        table: dict[str, str] = {}
        for employee in employees:
            if employee.employee_id not in table:
                table[employee.employee_id] = f"{prefix} {len(table) + 1}"
        return table

    def alias(self, employee_id: str) -> Optional[str]:
        return self._table.get(employee_id)

    def display_name(self, employee: Employee, enabled: bool = True) -> str:
        """Alias when masking is enabled, the real name otherwise.

        Employees missing from the table fall back to a generic label
        rather than leaking the real name.
        """
        if not enabled:
            return employee.display_name
        return self._table.get(employee.employee_id, f"{self._prefix} ?")
