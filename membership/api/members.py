"""Read-only member registry endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from membership.api.auth import get_identity
from membership.models import MemberStatus
from membership.schemas.members import MemberResponse
from membership.services import get_db
from membership.services.member_service import MemberService

router = APIRouter(prefix="/members", tags=["members"], dependencies=[Depends(get_identity)])


@router.get("", response_model=list[MemberResponse])
def list_members(
    search: str | None = Query(None),
    status_filter: MemberStatus | None = Query(None, alias="status"),
    center_id: int | None = Query(None, alias="centerId"),
    db: Session = Depends(get_db),
) -> list[MemberResponse]:
    members = MemberService(db).list_all(search=search, status=status_filter, center_id=center_id)
    return [MemberResponse.from_member(m) for m in members]


@router.get("/{member_id}", response_model=MemberResponse)
def get_member(member_id: int, db: Session = Depends(get_db)) -> MemberResponse:
    return MemberResponse.from_member(MemberService(db).get(member_id))
