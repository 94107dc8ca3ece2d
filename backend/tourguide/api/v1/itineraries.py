"""Itinerary API."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourguide.api.deps import CurrentUser, DbSession
from tourguide.models.itinerary import Itinerary
from tourguide.models.user import UserRole
from tourguide.schemas.attraction import AttractionRead
from tourguide.schemas.itinerary import (
    ItineraryAttractionIds,
    ItineraryAttractionsRemoved,
    ItineraryCreate,
    ItineraryList,
    ItineraryRead,
    ItineraryUpdate,
)
from tourguide.security.permissions import require_roles
from tourguide.services import itinerary_service

router = APIRouter()


async def _serialize(session: AsyncSession, itinerary: Itinerary) -> ItineraryRead:
    attractions = await itinerary_service.get_attractions(session, itinerary)
    read = ItineraryRead.model_validate(itinerary)
    read.attractions = [AttractionRead.model_validate(obj) for obj in attractions]
    return read


@router.get("", response_model=ItineraryList, summary="List my itineraries")
async def list_itineraries(session: DbSession, current_user: CurrentUser) -> ItineraryList:
    require_roles(current_user, {UserRole.TRAVELLER})
    itineraries = await itinerary_service.list_itineraries(session, user=current_user)
    return ItineraryList(
        count=len(itineraries),
        itineraries=[await _serialize(session, obj) for obj in itineraries],
    )


@router.post(
    "",
    response_model=ItineraryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create itinerary",
)
async def create_itinerary(
    payload: ItineraryCreate,
    session: DbSession,
    current_user: CurrentUser,
) -> ItineraryRead:
    require_roles(current_user, {UserRole.TRAVELLER})
    itinerary = await itinerary_service.create_itinerary(
        session,
        user=current_user,
        title=payload.title,
        start_date=payload.start_date,
        end_date=payload.end_date,
        notes=payload.notes,
        attraction_ids=payload.attraction_ids,
        items=[item.model_dump() for item in payload.items],
    )
    return await _serialize(session, itinerary)


@router.get("/{itinerary_id}", response_model=ItineraryRead, summary="Get itinerary")
async def get_itinerary(
    itinerary_id: uuid.UUID,
    session: DbSession,
    current_user: CurrentUser,
) -> ItineraryRead:
    require_roles(current_user, {UserRole.TRAVELLER})
    itinerary = await itinerary_service.get_itinerary(
        session, user=current_user, itinerary_id=itinerary_id
    )
    return await _serialize(session, itinerary)


@router.patch(
    "/{itinerary_id}", response_model=ItineraryRead, summary="Update itinerary"
)
async def update_itinerary(
    itinerary_id: uuid.UUID,
    payload: ItineraryUpdate,
    session: DbSession,
    current_user: CurrentUser,
) -> ItineraryRead:
    require_roles(current_user, {UserRole.TRAVELLER})
    changes = payload.model_dump(exclude_unset=True)
    if payload.items is not None:
        changes["items"] = [item.model_dump() for item in payload.items]
    itinerary = await itinerary_service.update_itinerary(
        session,
        user=current_user,
        itinerary_id=itinerary_id,
        **changes,
    )
    return await _serialize(session, itinerary)


@router.delete(
    "/{itinerary_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete itinerary",
)
async def delete_itinerary(
    itinerary_id: uuid.UUID,
    session: DbSession,
    current_user: CurrentUser,
) -> None:
    require_roles(current_user, {UserRole.TRAVELLER})
    await itinerary_service.delete_itinerary(
        session, user=current_user, itinerary_id=itinerary_id
    )


@router.post(
    "/{itinerary_id}/attractions",
    response_model=ItineraryRead,
    summary="Add attractions to itinerary",
)
async def add_attractions(
    itinerary_id: uuid.UUID,
    payload: ItineraryAttractionIds,
    session: DbSession,
    current_user: CurrentUser,
) -> ItineraryRead:
    require_roles(current_user, {UserRole.TRAVELLER})
    itinerary = await itinerary_service.add_attractions(
        session,
        user=current_user,
        itinerary_id=itinerary_id,
        attraction_ids=payload.attraction_ids,
    )
    return await _serialize(session, itinerary)


@router.delete(
    "/{itinerary_id}/attractions",
    response_model=ItineraryAttractionsRemoved,
    summary="Remove attractions from itinerary",
)
async def remove_attractions(
    itinerary_id: uuid.UUID,
    payload: ItineraryAttractionIds,
    session: DbSession,
    current_user: CurrentUser,
) -> ItineraryAttractionsRemoved:
    require_roles(current_user, {UserRole.TRAVELLER})
    itinerary, removed = await itinerary_service.remove_attractions(
        session,
        user=current_user,
        itinerary_id=itinerary_id,
        attraction_ids=payload.attraction_ids,
    )
    return ItineraryAttractionsRemoved(
        removed=removed, itinerary=await _serialize(session, itinerary)
    )
