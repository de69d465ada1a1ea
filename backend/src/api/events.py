"""
Events API endpoints for team-scoped calendar events.

Provides endpoints for:
- Listing the events of every team the caller belongs to
- Getting a single event (optionally with creator, updater and team)
- Creating events in one of the caller's teams
- Partially updating events with an optional optimistic lock token
- Deleting events

Design:
- Uses dependency injection for services
- Authentication is checked first (401), then body validation (400),
  then team membership (403)
- All endpoints use GUID format (evt_xxx, ten_xxx) for identifiers
- Error bodies are {"error": "..."} objects
"""

from typing import Union

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from backend.src.config.settings import get_settings
from backend.src.db.database import get_db
from backend.src.middleware.auth import require_auth, TenantContext
from backend.src.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetailResponse,
    EventListResponse,
)
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import (
    AccessDeniedError,
    ConflictError,
    EventNotFoundError,
    TeamNotFoundError,
    ValidationError,
)
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Create EventService instance with database session."""
    return EventService(
        db=db,
        require_update_token=get_settings().require_update_token,
    )


# ============================================================================
# Error mapping
# ============================================================================


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "Event not found"},
    )


def _access_denied(e: AccessDeniedError) -> HTTPException:
    message = "Access denied to this team" if e.resource == "team" else "Access denied"
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"error": message},
    )


def _bad_request(e: ValidationError) -> HTTPException:
    detail = {"error": e.message}
    if e.field:
        detail["field"] = e.field
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# ============================================================================
# API Endpoints
# ============================================================================


@router.get(
    "",
    response_model=EventListResponse,
    summary="List events",
    description="List the events of every team the caller belongs to, ordered by start date",
)
async def list_events(
    ctx: TenantContext = Depends(require_auth),
    event_service: EventService = Depends(get_event_service),
) -> EventListResponse:
    """
    List events visible to the caller.

    A caller without team memberships gets an empty list.

    Example:
        GET /api/v1/events

        Response:
        {
          "events": [
            {"guid": "evt_...", "title": "Standup", ...}
          ]
        }
    """
    events = event_service.get_events_by_teams(ctx.team_ids)

    logger.info(
        f"Listed {len(events)} events",
        extra={"user_guid": ctx.user_guid, "count": len(events)},
    )

    return EventListResponse(
        events=[EventResponse(**event_service.build_event_response(e)) for e in events]
    )


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
    description="Create an event in one of the caller's teams",
)
async def create_event(
    event_data: EventCreate,
    ctx: TenantContext = Depends(require_auth),
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Create a new event.

    Args:
        event_data: Event creation data (team_guid, title, location, dates, ...)

    Returns:
        Created event

    Raises:
        400: Validation failed or team does not exist
        403: Caller is not a member of team_guid
    """
    try:
        event_service.authorize_create(event_data.team_guid, ctx.team_ids)
        event = event_service.create_event(event_data, user_id=ctx.user_id)
    except AccessDeniedError as e:
        raise _access_denied(e)
    except TeamNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Team not found"},
        )
    except ValidationError as e:
        raise _bad_request(e)

    return EventResponse(**event_service.build_event_response(event))


@router.get(
    "/{guid}",
    response_model=Union[EventDetailResponse, EventResponse],
    summary="Get event",
    description="Get a single event by GUID",
)
async def get_event(
    guid: str,
    include_relations: bool = Query(
        False, description="Embed creator, updater and team"
    ),
    ctx: TenantContext = Depends(require_auth),
    event_service: EventService = Depends(get_event_service),
) -> Union[EventDetailResponse, EventResponse]:
    """
    Get event by GUID.

    Args:
        guid: Event GUID (evt_xxx format)
        include_relations: Embed creator, updater and team summaries

    Raises:
        404: Event not found
        403: Event belongs to a team the caller is not a member of
    """
    try:
        event = event_service.get_event_by_id(
            guid, ctx.team_ids, include_relations=include_relations
        )
    except EventNotFoundError:
        raise _not_found()
    except AccessDeniedError as e:
        raise _access_denied(e)

    if include_relations:
        return EventDetailResponse(**event_service.build_event_detail_response(event))
    return EventResponse(**event_service.build_event_response(event))


@router.patch(
    "/{guid}",
    response_model=EventResponse,
    summary="Update event",
    description="Partially update an event; send updated_at to guard against lost updates",
)
async def update_event(
    guid: str,
    event_data: EventUpdate,
    ctx: TenantContext = Depends(require_auth),
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Update an existing event.

    Only fields present in the body are changed. When the body carries
    updated_at, the update is rejected if the event changed since.

    Raises:
        400: Validation failed
        403: Event belongs to a team the caller is not a member of
        404: Event not found
        409: Event was modified after the given updated_at
    """
    try:
        event = event_service.update_event(
            guid,
            event_data.changes(),
            ctx.team_ids,
            user_id=ctx.user_id,
            client_updated_at=event_data.updated_at,
        )
    except EventNotFoundError:
        raise _not_found()
    except AccessDeniedError as e:
        raise _access_denied(e)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": "Conflict",
                "message": e.message,
                "server_updated_at": e.server_updated_at.isoformat() if e.server_updated_at else None,
                "client_updated_at": e.client_updated_at.isoformat() if e.client_updated_at else None,
            },
        )
    except ValidationError as e:
        raise _bad_request(e)

    return EventResponse(**event_service.build_event_response(event))


@router.delete(
    "/{guid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event",
    description="Delete an event",
)
async def delete_event(
    guid: str,
    ctx: TenantContext = Depends(require_auth),
    event_service: EventService = Depends(get_event_service),
) -> Response:
    """
    Delete an event.

    Raises:
        403: Event belongs to a team the caller is not a member of
        404: Event not found
    """
    try:
        event_service.delete_event(guid, ctx.team_ids)
    except EventNotFoundError:
        raise _not_found()
    except AccessDeniedError as e:
        raise _access_denied(e)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
