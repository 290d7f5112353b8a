from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request, Response

from organizer.core.deps import get_records
from organizer.db.models import ENTITIES, EntityName
from organizer.routers.common import record_errors
from organizer.services.records import RecordService

router = APIRouter(prefix="/api/events", tags=["Events"])

EVENTS = ENTITIES[EntityName.calendar_events]


@router.get("")
def list_events(records: RecordService = Depends(get_records)):
    with record_errors(EVENTS, "list"):
        return records.list(EVENTS.name)


@router.post("", status_code=201)
def create_event(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(EVENTS, "create", request, records.user_id):
        return records.create(EVENTS.name, payload)


@router.put("/{event_id}")
def update_event(
    request: Request,
    event_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(EVENTS, "update", request, records.user_id, str(event_id)):
        return records.update(EVENTS.name, str(event_id), payload)


@router.delete("/{event_id}", status_code=204)
def delete_event(
    request: Request,
    event_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(EVENTS, "delete", request, records.user_id, str(event_id)):
        records.delete(EVENTS.name, str(event_id))
    return Response(status_code=204)
