"""Single authorization policy table.

Maps (action, entity) to the set of roles allowed to perform it. Every
router checks permissions through ``utils.auth_utils.require_permission``,
never with ad-hoc role lists.
"""
from enum import Enum


class Role(str, Enum):
    OWNER = "Owner"
    PLANT_MANAGER = "Plant Manager"
    SUPERVISOR = "Supervisor"
    ACCOUNTANT = "Accountant"


ALL_ROLES = frozenset(role.value for role in Role)
MANAGERS = frozenset({Role.OWNER.value, Role.PLANT_MANAGER.value})
FLOOR_STAFF = frozenset({Role.OWNER.value, Role.PLANT_MANAGER.value, Role.SUPERVISOR.value})
OWNER_ONLY = frozenset({Role.OWNER.value})
FINANCE = frozenset({Role.OWNER.value, Role.ACCOUNTANT.value, Role.PLANT_MANAGER.value})

POLICY = {
    ("read", "products"): ALL_ROLES,
    ("create", "products"): MANAGERS,
    ("update", "products"): MANAGERS,
    ("delete", "products"): OWNER_ONLY,

    ("read", "raw_materials"): ALL_ROLES,
    ("create", "raw_materials"): MANAGERS,
    ("update", "raw_materials"): MANAGERS,
    ("delete", "raw_materials"): OWNER_ONLY,

    ("read", "bom"): ALL_ROLES,
    ("create", "bom"): MANAGERS,
    ("delete", "bom"): MANAGERS,

    ("read", "inventory"): ALL_ROLES,
    ("read", "inventory_transactions"): ALL_ROLES,
    ("create", "inventory_transactions"): FLOOR_STAFF,

    ("read", "production_orders"): ALL_ROLES,
    ("create", "production_orders"): FLOOR_STAFF,
    ("start", "production_orders"): FLOOR_STAFF,
    ("complete", "production_orders"): FLOOR_STAFF,

    ("read", "downtime_events"): ALL_ROLES,
    ("create", "downtime_events"): FLOOR_STAFF,

    ("read", "alerts"): ALL_ROLES,
    ("delete", "alerts"): ALL_ROLES,

    ("read", "dashboard"): ALL_ROLES,
    ("read", "cost_reports"): FINANCE,

    ("read", "audit_log"): OWNER_ONLY,
    ("create", "users"): OWNER_ONLY,
}


def is_allowed(role: str, action: str, entity: str) -> bool:
    """Unknown (action, entity) pairs are denied."""
    return role in POLICY.get((action, entity), frozenset())
