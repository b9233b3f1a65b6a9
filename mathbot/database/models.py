"""SQLAlchemy models for MathBot."""

from datetime import datetime

from sqlalchemy import BigInteger, String, Text, UniqueConstraint, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all models with async attributes support."""

    pass


class KeyValueEntry(Base):
    """One persisted string value (history blob or preference) of a Telegram user."""

    __tablename__ = "kv_entries"
    __table_args__ = (UniqueConstraint("owner_id", "key", name="uq_kv_owner_key"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(BigInteger, index=True)
    key: Mapped[str] = mapped_column(String(64))
    value: Mapped[str] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<KeyValueEntry(owner_id={self.owner_id}, key={self.key})>"
