from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request, Response

from organizer.core.deps import get_records
from organizer.db.models import ENTITIES, EntityName
from organizer.routers.common import record_errors
from organizer.services.records import RecordService

router = APIRouter(prefix="/api/notes", tags=["Notes"])

NOTES = ENTITIES[EntityName.notes]


@router.get("")
def list_notes(records: RecordService = Depends(get_records)):
    with record_errors(NOTES, "list"):
        return records.list(NOTES.name)


@router.post("", status_code=201)
def create_note(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(NOTES, "create", request, records.user_id):
        return records.create(NOTES.name, payload)


@router.put("/{note_id}")
def update_note(
    request: Request,
    note_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(NOTES, "update", request, records.user_id, str(note_id)):
        return records.update(NOTES.name, str(note_id), payload)


@router.delete("/{note_id}", status_code=204)
def delete_note(
    request: Request,
    note_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(NOTES, "delete", request, records.user_id, str(note_id)):
        records.delete(NOTES.name, str(note_id))
    return Response(status_code=204)
