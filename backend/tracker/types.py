"""Common type aliases for the capacity tracker."""
from typing import Any

# A stored weekly declaration (camelCase keys as persisted)
EntryRecord = dict[str, Any]
# One matter inside an entry
ProjectRecord = dict[str, Any]
# An entry expanded with derived load figures
DashboardRow = dict[str, Any]
# {name, password}
EmployeeRecord = dict[str, Any]
# {"ok": bool, ...} returned by every service call
ServiceResult = dict[str, Any]

# List aliases
EmployeeList = list[EmployeeRecord]
DashboardRowList = list[DashboardRow]
