from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request, Response

from organizer.core.deps import get_records
from organizer.db.models import ENTITIES, EntityName
from organizer.routers.common import record_errors
from organizer.services.records import RecordService

router = APIRouter(prefix="/api/kanban", tags=["Kanban"])

KANBAN = ENTITIES[EntityName.kanban_tasks]


@router.get("")
def list_cards(records: RecordService = Depends(get_records)):
    with record_errors(KANBAN, "list"):
        return records.list(KANBAN.name)


@router.post("", status_code=201)
def create_card(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(KANBAN, "create", request, records.user_id):
        return records.create(KANBAN.name, payload)


@router.put("/{card_id}")
def update_card(
    request: Request,
    card_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(KANBAN, "update", request, records.user_id, str(card_id)):
        return records.update(KANBAN.name, str(card_id), payload)


@router.delete("/{card_id}", status_code=204)
def delete_card(
    request: Request,
    card_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(KANBAN, "delete", request, records.user_id, str(card_id)):
        records.delete(KANBAN.name, str(card_id))
    return Response(status_code=204)
