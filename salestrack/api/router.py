from typing import Any
from fastapi import APIRouter, Body, Depends, Query, Request, Response
from .schemas import NotFoundResponse, ServerErrorResponse, ValidationErrorResponse
from ..event_models import Event, EventSummary
from ..query import EventFilter, parse_filter
from ..services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])

ERROR_RESPONSES = {500: {"model": ServerErrorResponse}}


def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def get_filter(
    date_from: str | None = Query(None, description="Start date (YYYY-MM-DD), inclusive"),
    date_to: str | None = Query(None, description="End date (YYYY-MM-DD), inclusive"),
    event_type: str | None = Query(None, alias="type", description="payment or upsell"),
    name: str | None = Query(None, description="Case-insensitive name substring"),
    email: str | None = Query(None, description="Case-insensitive email substring"),
) -> EventFilter:
    return parse_filter({
        "date_from": date_from,
        "date_to": date_to,
        "type": event_type,
        "name": name,
        "email": email,
    })


@router.post(
    "",
    response_model=Event,
    status_code=201,
    responses={400: {"model": ValidationErrorResponse}, **ERROR_RESPONSES},
)
async def create_event(
    payload: Any = Body(None),
    service: EventService = Depends(get_event_service),
):
    """Validate and record a payment or upsell event."""
    return await service.create_event(payload)


@router.get(
    "",
    response_model=list[Event],
    responses={400: {"model": ValidationErrorResponse}, **ERROR_RESPONSES},
)
async def list_events(
    filt: EventFilter = Depends(get_filter),
    service: EventService = Depends(get_event_service),
):
    """List events matching the filters, most recent first."""
    return await service.list_events(filt)


@router.get(
    "/summary",
    response_model=EventSummary,
    responses={400: {"model": ValidationErrorResponse}, **ERROR_RESPONSES},
)
async def events_summary(
    filt: EventFilter = Depends(get_filter),
    service: EventService = Depends(get_event_service),
):
    """Total value and per-type counts over the filtered events."""
    return await service.summary(filt)


@router.delete(
    "/{event_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"model": NotFoundResponse}, **ERROR_RESPONSES},
)
async def delete_event(
    event_id: str,
    service: EventService = Depends(get_event_service),
):
    """Delete an event by id."""
    await service.delete_event(event_id)
    return Response(status_code=204)
