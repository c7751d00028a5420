"""Member registry: read access to members and the last-payment-date field."""

import logging
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload

from membership.errors import NotFoundError
from membership.models import Member, MemberStatus

logger = logging.getLogger(__name__)


class MemberService:
    """Member registry consumed by the payment ledger and reports.

    Creating, updating and deleting members is handled elsewhere; this
    service only reads members and maintains last_payment_date.
    """

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def exists(self, member_id: int) -> bool:
        """Return True if a member with this ID exists."""
        return self.db.scalar(select(Member.id).where(Member.id == member_id)) is not None

    def get(self, member_id: int) -> Member:
        """Get member by ID with its center loaded.

        Raises:
            NotFoundError: If no member has this ID
        """
        member = self.db.scalar(
            select(Member).options(joinedload(Member.center)).where(Member.id == member_id)
        )
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def set_last_payment_date(self, member_id: int, payment_date: date) -> bool:
        """Advance the member's last payment date.

        The date only moves forward: a backward-dated settlement leaves the
        stored value untouched. Changes are left in the session for the
        caller to commit with the payment that caused them.

        Returns:
            True if the stored date changed
        """
        member = self.db.get(Member, member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")

        if member.last_payment_date is not None and payment_date <= member.last_payment_date:
            logger.debug(
                f"Keeping last_payment_date={member.last_payment_date} for member {member_id} "
                f"(settlement dated {payment_date})"
            )
            return False

        member.last_payment_date = payment_date
        return True

    def list_by_center(self, center_id: int) -> list[Member]:
        """List members enrolled in a center, ordered by name."""
        return list(
            self.db.scalars(
                select(Member).where(Member.center_id == center_id).order_by(Member.name)
            )
        )

    def list_all(
        self,
        search: str | None = None,
        status: MemberStatus | None = None,
        center_id: int | None = None,
    ) -> list[Member]:
        """List members with optional filters.

        Args:
            search: Substring matched against name, email and phone
            status: Only members with this status
            center_id: Only members of this center

        Returns:
            Members with their centers loaded, ordered by name
        """
        stmt = select(Member).options(joinedload(Member.center))

        if search:
            stmt = stmt.where(
                or_(
                    Member.name.contains(search),
                    Member.email.contains(search),
                    Member.phone.contains(search),
                )
            )
        if status is not None:
            stmt = stmt.where(Member.status == status)
        if center_id is not None:
            stmt = stmt.where(Member.center_id == center_id)

        return list(self.db.scalars(stmt.order_by(Member.name)))


__all__ = ["MemberService"]
