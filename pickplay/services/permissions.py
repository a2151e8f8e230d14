"""Role matrix and permission gate for staff operations.

Evaluation order is fixed: the ``OVERRIDE_RULES`` tuple is walked first, in
declaration order, and the first rule that matches the target and excludes
the actor's role denies the request. Only when no override denies does the
base ``ROLE_MATRIX`` decide. The gate is a pure function; it never raises and
never touches storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EntityKind(str, Enum):
    PRODUCT = "product"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    USER = "user"
    ROLE = "role"
    ORDER = "order"
    PAYMENT_METHOD = "payment_method"
    AUDIT = "audit"


class Operation(str, Enum):
    LIST = "list"
    READ = "read"
    SEARCH = "search"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


ROOT_ROLE = "root"
ALL_OPERATIONS: frozenset[Operation] = frozenset(Operation)

ROLE_MATRIX: dict[str, frozenset[Operation]] = {
    ROOT_ROLE: ALL_OPERATIONS,
    "analyst": frozenset({Operation.LIST, Operation.SEARCH}),
    "restocker": frozenset({Operation.CREATE, Operation.UPDATE, Operation.LIST, Operation.SEARCH}),
}

# Stable denial reasons callers may branch on.
REASON_UNKNOWN_ROLE = "unknown_role"
REASON_UNKNOWN_TARGET = "unknown_entity_or_operation"
REASON_INSUFFICIENT_ROLE = "insufficient_role_permission"
REASON_ORDER_CREATE = "order_create_customer_only"
REASON_ORDER_LISTING = "order_listing_restricted"
REASON_USER_DELETE = "user_delete_root_only"
REASON_CATALOG_STRUCTURE = "catalog_structure_root_only"
REASON_PAYMENT_METHOD = "payment_method_root_only"
REASON_ENTITY_ACCESS = "entity_access_restricted"


@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: str | None = None
    message: str | None = None


ALLOW = PermissionDecision(allowed=True)


@dataclass(frozen=True)
class OverrideRule:
    """Denies ``operations`` on ``entities`` to every role outside ``permitted_roles``.

    An empty ``operations`` set matches every operation. An empty
    ``permitted_roles`` set denies everyone, root included.
    """

    name: str
    entities: frozenset[EntityKind]
    operations: frozenset[Operation]
    permitted_roles: frozenset[str]
    reason: str
    message: str

    def matches(self, entity: EntityKind, operation: Operation) -> bool:
        if entity not in self.entities:
            return False
        return not self.operations or operation in self.operations

    def denies(self, role: str) -> bool:
        return role not in self.permitted_roles


def _rule(
    name: str,
    entities: set[EntityKind],
    operations: set[Operation],
    permitted_roles: set[str],
    reason: str,
    message: str,
) -> OverrideRule:
    return OverrideRule(
        name=name,
        entities=frozenset(entities),
        operations=frozenset(operations),
        permitted_roles=frozenset(permitted_roles),
        reason=reason,
        message=message,
    )


OVERRIDE_RULES: tuple[OverrideRule, ...] = (
    _rule(
        "order-create-storefront-only",
        {EntityKind.ORDER},
        {Operation.CREATE},
        set(),
        REASON_ORDER_CREATE,
        "Orders can only be created by customers from the storefront.",
    ),
    _rule(
        "order-listing",
        {EntityKind.ORDER},
        {Operation.LIST, Operation.SEARCH},
        {ROOT_ROLE, "analyst"},
        REASON_ORDER_LISTING,
        "Only root and analyst roles may list or search orders.",
    ),
    _rule(
        "user-delete",
        {EntityKind.USER},
        {Operation.DELETE},
        {ROOT_ROLE},
        REASON_USER_DELETE,
        "Only the root role may delete users.",
    ),
    _rule(
        "catalog-structure-create",
        {EntityKind.CATEGORY, EntityKind.SUBCATEGORY},
        {Operation.CREATE},
        {ROOT_ROLE},
        REASON_CATALOG_STRUCTURE,
        "Only the root role may create categories or subcategories.",
    ),
    _rule(
        "payment-method-management",
        {EntityKind.PAYMENT_METHOD},
        {Operation.CREATE, Operation.DELETE},
        {ROOT_ROLE},
        REASON_PAYMENT_METHOD,
        "Only the root role may create or delete payment methods.",
    ),
    _rule(
        "user-entity-access",
        {EntityKind.USER},
        set(),
        {ROOT_ROLE},
        REASON_ENTITY_ACCESS,
        "Only the root role may access user accounts.",
    ),
    _rule(
        "audit-entity-access",
        {EntityKind.AUDIT},
        set(),
        {ROOT_ROLE, "analyst"},
        REASON_ENTITY_ACCESS,
        "Only root and analyst roles may access the audit trail.",
    ),
)


def _normalize(value: Enum | str) -> str:
    if isinstance(value, Enum):
        return value.value
    return str(value).strip().lower().replace("-", "_")


def _coerce(entity: EntityKind | str, operation: Operation | str) -> tuple[EntityKind, Operation] | None:
    """Accept enum members or their names, with either ``-`` or ``_`` as separator."""
    try:
        return EntityKind(_normalize(entity)), Operation(_normalize(operation))
    except ValueError:
        return None


def base_entitlement(role: str) -> frozenset[Operation]:
    """Return the operations the base matrix grants ``role``."""
    return ROLE_MATRIX.get(role, frozenset())


def check_permission(
    role: str | None,
    entity: EntityKind | str,
    operation: Operation | str,
    *,
    rules: tuple[OverrideRule, ...] = OVERRIDE_RULES,
) -> PermissionDecision:
    """Decide whether ``role`` may perform ``operation`` on ``entity``."""
    role_name = (role or "").strip().lower()
    target = _coerce(entity, operation)
    if target is None:
        return PermissionDecision(False, REASON_UNKNOWN_TARGET, f"Unknown entity or operation: {entity}/{operation}.")
    entity_kind, op = target

    for rule in rules:
        if rule.matches(entity_kind, op) and rule.denies(role_name):
            return PermissionDecision(False, rule.reason, rule.message)

    if role_name not in ROLE_MATRIX:
        return PermissionDecision(False, REASON_UNKNOWN_ROLE, f"Role '{role_name or '-'}' is not recognised.")
    if op not in ROLE_MATRIX[role_name]:
        return PermissionDecision(
            False,
            REASON_INSUFFICIENT_ROLE,
            f"Role '{role_name}' is not allowed to {op.value} {entity_kind.value} records.",
        )
    return ALLOW
