"""Member registry read schemas."""

from datetime import date, datetime
from decimal import Decimal

from membership.models import Member, MemberStatus
from membership.schemas import CamelModel


class EmergencyContact(CamelModel):
    name: str | None = None
    phone: str | None = None
    relation: str | None = None


class MemberResponse(CamelModel):
    """Member view with center name and dues joined in."""

    id: int
    name: str
    email: str
    phone: str | None = None
    address: str
    birth_date: date | None = None
    external_id: str | None = None
    status: MemberStatus
    center_id: int
    center_name: str
    registered_at: datetime
    last_payment_date: date | None = None
    monthly_dues: Decimal
    emergency_contact: EmergencyContact
    notes: str | None = None

    @classmethod
    def from_member(cls, member: Member) -> "MemberResponse":
        return cls(
            id=member.id,
            name=member.name,
            email=member.email,
            phone=member.phone,
            address=member.address,
            birth_date=member.birth_date,
            external_id=member.external_id,
            status=member.status,
            center_id=member.center_id,
            center_name=member.center.name,
            registered_at=member.registered_at,
            last_payment_date=member.last_payment_date,
            monthly_dues=member.center.monthly_dues,
            emergency_contact=EmergencyContact(
                name=member.emergency_contact_name,
                phone=member.emergency_contact_phone,
                relation=member.emergency_contact_relation,
            ),
            notes=member.notes,
        )
