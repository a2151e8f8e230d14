"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from pickplay.models import audit_log as _audit_log  # noqa: E402,F401
from pickplay.models import catalog as _catalog  # noqa: E402,F401
from pickplay.models import order as _order  # noqa: E402,F401
from pickplay.models import user as _user  # noqa: E402,F401
