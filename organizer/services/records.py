from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from organizer.core.sanitizer import get_entity, sanitize
from organizer.db.models import OWNER_FIELD, EntityName


class RecordNotFound(LookupError):
    pass


class RecordService:
    """
    CRUD поверх таблиц провайдера. Каждый запрос фильтруется по user_id
    владельца, user_id в записи выставляется только здесь.
    """

    def __init__(self, gateway, user_id: str, access_token: str):
        self.gateway = gateway
        self.user_id = user_id
        self.access_token = access_token

    def _owned(self, record_id: Optional[str] = None) -> Dict[str, Any]:
        filters = {}
        if record_id is not None:
            filters["id"] = record_id
        filters[OWNER_FIELD] = self.user_id
        return filters

    def list(self, name: EntityName) -> List[Dict[str, Any]]:
        entity = get_entity(name)
        return self.gateway.select(
            entity.table,
            self.access_token,
            self._owned(),
            order_by=entity.order_by,
            descending=entity.descending,
        )

    def create(self, name: EntityName, payload: Any) -> Optional[Dict[str, Any]]:
        entity = get_entity(name)
        row = {**sanitize(entity.name, payload), OWNER_FIELD: self.user_id}
        return self.gateway.insert(entity.table, self.access_token, row)

    def update(self, name: EntityName, record_id: str, payload: Any) -> Dict[str, Any]:
        entity = get_entity(name)
        values = sanitize(entity.name, payload)
        if entity.name == EntityName.notes:
            values["updated_at"] = datetime.now(timezone.utc).isoformat()

        row = self.gateway.update(entity.table, self.access_token, values, self._owned(record_id))
        if row is None:
            raise RecordNotFound(record_id)
        return row

    def delete(self, name: EntityName, record_id: str) -> None:
        entity = get_entity(name)
        self.gateway.delete(entity.table, self.access_token, self._owned(record_id))

    def _fetch(self, name: EntityName, record_id: str, columns: str) -> Dict[str, Any]:
        entity = get_entity(name)
        rows = self.gateway.select(
            entity.table, self.access_token, self._owned(record_id), columns=columns
        )
        if not rows:
            raise RecordNotFound(record_id)
        return rows[0]

    def toggle(self, name: EntityName, record_id: str) -> Dict[str, Any]:
        entity = get_entity(name)
        field = entity.toggle_field
        if field is None:
            raise ValueError(f"{entity.table} has no toggle field")

        current = self._fetch(name, record_id, field)
        row = self.gateway.update(
            entity.table,
            self.access_token,
            {field: not current.get(field)},
            self._owned(record_id),
        )
        if row is None:
            raise RecordNotFound(record_id)
        return row

    def hide_occurrence(self, record_id: str, date: str) -> Dict[str, Any]:
        """Скрыть одно повторение повторяющейся задачи."""
        current = self._fetch(EntityName.tasks, record_id, "deleted_dates, recurrence")

        dates = list(current.get("deleted_dates") or [])
        if date not in dates:
            dates.append(date)

        row = self.gateway.update(
            EntityName.tasks.value,
            self.access_token,
            {"deleted_dates": dates},
            self._owned(record_id),
        )
        if row is None:
            raise RecordNotFound(record_id)
        return row
