from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request, Response

from organizer.core.deps import get_records
from organizer.db.models import ENTITIES, EntityName
from organizer.routers.common import record_errors
from organizer.services.records import RecordService

router = APIRouter(prefix="/api/finance", tags=["Finance"])

TRANSACTIONS = ENTITIES[EntityName.transactions]
BILLS = ENTITIES[EntityName.fixed_bills]
INVESTMENTS = ENTITIES[EntityName.investments]


# ---- transactions (без редактирования, только создать/удалить) ----

@router.get("/transactions")
def list_transactions(records: RecordService = Depends(get_records)):
    with record_errors(TRANSACTIONS, "list"):
        return records.list(TRANSACTIONS.name)


@router.post("/transactions", status_code=201)
def create_transaction(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(TRANSACTIONS, "create", request, records.user_id):
        return records.create(TRANSACTIONS.name, payload)


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    request: Request,
    transaction_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(TRANSACTIONS, "delete", request, records.user_id, str(transaction_id)):
        records.delete(TRANSACTIONS.name, str(transaction_id))
    return Response(status_code=204)


# ---- fixed bills ----

@router.get("/bills")
def list_bills(records: RecordService = Depends(get_records)):
    with record_errors(BILLS, "list"):
        return records.list(BILLS.name)


@router.post("/bills", status_code=201)
def create_bill(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(BILLS, "create", request, records.user_id):
        return records.create(BILLS.name, payload)


@router.put("/bills/{bill_id}")
def update_bill(
    request: Request,
    bill_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(BILLS, "update", request, records.user_id, str(bill_id)):
        return records.update(BILLS.name, str(bill_id), payload)


@router.patch("/bills/{bill_id}/toggle")
def toggle_bill(
    request: Request,
    bill_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(BILLS, "toggle", request, records.user_id, str(bill_id)):
        return records.toggle(BILLS.name, str(bill_id))


@router.delete("/bills/{bill_id}", status_code=204)
def delete_bill(
    request: Request,
    bill_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(BILLS, "delete", request, records.user_id, str(bill_id)):
        records.delete(BILLS.name, str(bill_id))
    return Response(status_code=204)


# ---- investments ----

@router.get("/investments")
def list_investments(records: RecordService = Depends(get_records)):
    with record_errors(INVESTMENTS, "list"):
        return records.list(INVESTMENTS.name)


@router.post("/investments", status_code=201)
def create_investment(
    request: Request,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(INVESTMENTS, "create", request, records.user_id):
        return records.create(INVESTMENTS.name, payload)


@router.put("/investments/{investment_id}")
def update_investment(
    request: Request,
    investment_id: UUID,
    payload: Dict[str, Any] = Body(default={}),
    records: RecordService = Depends(get_records),
):
    with record_errors(INVESTMENTS, "update", request, records.user_id, str(investment_id)):
        return records.update(INVESTMENTS.name, str(investment_id), payload)


@router.delete("/investments/{investment_id}", status_code=204)
def delete_investment(
    request: Request,
    investment_id: UUID,
    records: RecordService = Depends(get_records),
):
    with record_errors(INVESTMENTS, "delete", request, records.user_id, str(investment_id)):
        records.delete(INVESTMENTS.name, str(investment_id))
    return Response(status_code=204)
