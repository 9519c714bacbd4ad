"""SQLAlchemy ORM models."""

from vidtube.models.account import Account
from vidtube.models.base import Base
from vidtube.models.subscription import Subscription

__all__ = ["Account", "Base", "Subscription"]
