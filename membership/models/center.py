"""Center ORM model for the physical locations members enroll in."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from membership.models import Base, BaseModel


class Center(Base, BaseModel):
    """Model representing a center (gym, school) with its monthly dues."""

    __tablename__ = "centers"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    address: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    manager_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    monthly_dues: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Configured monthly dues amount",
    )

    members: Mapped[list["Member"]] = relationship(  # noqa: F821
        "Member",
        back_populates="center",
    )

    __table_args__ = (
        CheckConstraint("monthly_dues >= 0", name="ck_center_monthly_dues_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Center(id={self.id}, name={self.name}, monthly_dues={self.monthly_dues})>"


__all__ = ["Center"]
