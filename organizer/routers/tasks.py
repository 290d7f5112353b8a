from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Request, Response

from organizer.core.deps import get_records
from organizer.db.models import ENTITIES, EntityName
from organizer.routers.common import record_errors
from organizer.services.records import RecordService

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])

TASKS = ENTITIES[EntityName.tasks]


@router.get("")
def list_tasks(records: RecordService = Depends(get_records)):
    with record_errors(TASKS, "list"):
        return records.list(TASKS.name)


@router.post("", status_code=201)
def create_task(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(TASKS, "create", request, records.user_id):
        return records.create(TASKS.name, payload)


@router.put("/{task_id}")
def update_task(
    request: Request,
    task_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(TASKS, "update", request, records.user_id, str(task_id)):
        return records.update(TASKS.name, str(task_id), payload)


@router.patch("/{task_id}/toggle")
def toggle_task(
    request: Request,
    task_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(TASKS, "toggle", request, records.user_id, str(task_id)):
        return records.toggle(TASKS.name, str(task_id))


@router.patch("/{task_id}/hide")
def hide_task(
    request: Request,
    task_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    # скрываем одно повторение, сама задача остаётся
    date = payload.get("date")
    if not date:
        raise HTTPException(status_code=400, detail="Date is required")

    with record_errors(TASKS, "hide", request, records.user_id, str(task_id)):
        return records.hide_occurrence(str(task_id), date)


@router.delete("/{task_id}", status_code=204)
def delete_task(
    request: Request,
    task_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(TASKS, "delete", request, records.user_id, str(task_id)):
        records.delete(TASKS.name, str(task_id))
    return Response(status_code=204)
