"""Seeding of the fixed vocabularies and the bootstrap root account."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from pickplay.core.config import settings
from pickplay.core.security import get_password_hash
from pickplay.models import AUDITED_ACTIONS, ROLE_NAMES, AuditAction, Role, User
from pickplay.services.permissions import ROOT_ROLE

logger = logging.getLogger(__name__)


def ensure_roles(db: Session) -> None:
    existing = set(db.scalars(select(Role.name)).all())
    missing = [name for name in ROLE_NAMES if name not in existing]
    if missing:
        db.add_all(Role(name=name) for name in missing)
        db.commit()
        logger.info("[BOOTSTRAP] Roles created: %s", ", ".join(missing))


def ensure_audit_actions(db: Session) -> None:
    existing = set(db.scalars(select(AuditAction.name)).all())
    missing = [name for name in AUDITED_ACTIONS if name not in existing]
    if missing:
        db.add_all(AuditAction(name=name) for name in missing)
        db.commit()
        logger.info("[BOOTSTRAP] Audit actions created: %s", ", ".join(missing))


def ensure_root_user(db: Session) -> bool:
    """Create the root account when ROOT_PASSWORD is configured.

    Returns:
        bool: True when a root account exists after this call.
    """
    if db.scalar(select(User).join(Role).where(Role.name == ROOT_ROLE).limit(1)) is not None:
        return True
    if not settings.root_password:
        logger.warning("[BOOTSTRAP] No root account and ROOT_PASSWORD is unset; skipping root bootstrap.")
        return False

    role = db.scalar(select(Role).where(Role.name == ROOT_ROLE).limit(1))
    if role is None:
        logger.warning("[BOOTSTRAP] Root role missing; run role seeding first.")
        return False
    db.add(
        User(
            username=settings.root_username,
            password_hash=get_password_hash(settings.root_password),
            role_id=role.id,
            is_active=True,
        )
    )
    db.commit()
    logger.warning("[SECURITY] Root account '%s' created from ROOT_PASSWORD.", settings.root_username)
    return True


def ensure_seed_data(db: Session) -> None:
    ensure_roles(db)
    ensure_audit_actions(db)
