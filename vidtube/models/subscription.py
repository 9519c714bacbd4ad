"""ORM model for channel subscriptions (account -> account)."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from vidtube.models.base import Base, utcnow


class Subscription(Base):
    """
    subscriber_id follows channel_id; both are accounts.

    One row per (subscriber, channel) pair.
    """

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_subscriber_channel"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    subscriber_id = Column(
        String(32),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    channel_id = Column(
        String(32),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
