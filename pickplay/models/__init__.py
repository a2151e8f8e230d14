"""Application models package."""

from pickplay.models.audit_log import AUDITED_ACTIONS, AuditAction, AuditLogEntry
from pickplay.models.catalog import PaymentMethod, Product
from pickplay.models.order import Order, OrderLine
from pickplay.models.user import ROLE_NAMES, Role, User

__all__ = [
    "AUDITED_ACTIONS", "AuditAction", "AuditLogEntry", "PaymentMethod", "Product",
    "Order", "OrderLine", "ROLE_NAMES", "Role", "User",
]
