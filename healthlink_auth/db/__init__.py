"""User directory models and adapters for healthlink_auth."""

from healthlink_auth.db.models import BaseHealthLinkUserTable
from healthlink_auth.db.protocols import HealthLinkUserProtocol, UserDirectory, UserRole
from healthlink_auth.db.sqlalchemy.adapter import SQLAlchemyUserDirectory

__all__ = [
    "BaseHealthLinkUserTable",
    "HealthLinkUserProtocol",
    "SQLAlchemyUserDirectory",
    "UserDirectory",
    "UserRole",
]
