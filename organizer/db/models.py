import enum
from dataclasses import dataclass
from typing import Optional, Tuple


class EntityName(str, enum.Enum):
    tasks = "tasks"
    notes = "notes"
    calendar_events = "calendar_events"
    kanban_tasks = "kanban_tasks"
    transactions = "transactions"
    fixed_bills = "fixed_bills"
    investments = "investments"


@dataclass(frozen=True)
class Entity:
    """
    Таблица у провайдера и список полей, которые клиент может записывать.
    user_id, id и служебные даты сюда не входят никогда.
    """
    name: EntityName
    fields: Tuple[str, ...]
    order_by: str
    descending: bool = False
    label: str = "record"
    toggle_field: Optional[str] = None

    @property
    def table(self) -> str:
        return self.name.value


ENTITIES = {
    EntityName.tasks: Entity(
        name=EntityName.tasks,
        fields=("title", "completed", "date", "priority", "category", "folder_id", "recurrence"),
        order_by="date",
        label="task",
        toggle_field="completed",
    ),
    EntityName.notes: Entity(
        name=EntityName.notes,
        fields=("title", "content", "category", "tags"),
        order_by="updated_at",
        descending=True,
        label="note",
    ),
    EntityName.calendar_events: Entity(
        name=EntityName.calendar_events,
        fields=(
            "title", "start_time", "end_time", "description", "color", "recurring", "recurrence",
        ),
        order_by="start_time",
        label="event",
    ),
    EntityName.kanban_tasks: Entity(
        name=EntityName.kanban_tasks,
        fields=("title", "description", "status", "priority"),
        order_by="created_at",
        descending=True,
        label="kanban task",
    ),
    EntityName.transactions: Entity(
        name=EntityName.transactions,
        fields=("description", "amount", "type", "category", "date"),
        order_by="date",
        descending=True,
        label="transaction",
    ),
    EntityName.fixed_bills: Entity(
        name=EntityName.fixed_bills,
        fields=("title", "amount", "due_day", "paid"),
        order_by="due_day",
        label="fixed bill",
        toggle_field="paid",
    ),
    EntityName.investments: Entity(
        name=EntityName.investments,
        fields=("name", "type", "current_value", "yield_rate"),
        order_by="name",
        label="investment",
    ),
}

# колонки, которые выставляет только сервер
OWNER_FIELD = "user_id"
