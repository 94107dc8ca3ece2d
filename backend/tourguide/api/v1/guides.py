"""Guide directory and availability publishing."""

from __future__ import annotations

from fastapi import APIRouter

from tourguide.api.deps import CurrentUser, DbSession
from tourguide.core.errors import GuideNotFound
from tourguide.models.user import UserRole
from tourguide.schemas.guide import AvailabilityPublish, GuideRead
from tourguide.security.permissions import require_roles
from tourguide.services import availability_service

router = APIRouter()


@router.get("", response_model=list[GuideRead], summary="List guides")
async def list_guides(session: DbSession, date: str | None = None) -> list[GuideRead]:
    guides = await availability_service.list_guides(session, day=date)
    return [GuideRead.model_validate(guide) for guide in guides]


@router.patch(
    "/availability",
    response_model=GuideRead,
    summary="Publish capacity for a date",
)
async def publish_availability(
    payload: AvailabilityPublish,
    session: DbSession,
    current_user: CurrentUser,
) -> GuideRead:
    require_roles(current_user, {UserRole.GUIDE})
    guide = await availability_service.get_guide_for_user(session, user=current_user)
    if guide is None:
        raise GuideNotFound()
    await availability_service.publish_availability(
        session,
        guide=guide,
        day=payload.date,
        total_slots=payload.slots,
    )
    await session.refresh(guide, attribute_names=["availability"])
    return GuideRead.model_validate(guide)
