from collections.abc import Mapping
from typing import Any, Dict, Union

from organizer.db.models import ENTITIES, Entity, EntityName


class UnknownEntityError(LookupError):
    """Для сущности не задан список разрешённых полей."""


def get_entity(entity: Union[EntityName, str]) -> Entity:
    try:
        return ENTITIES[EntityName(entity)]
    except (ValueError, KeyError):
        raise UnknownEntityError(f"No field whitelist for entity {entity!r}") from None


def sanitize(entity: Union[EntityName, str], payload: Any) -> Dict[str, Any]:
    """
    Оставляет только разрешённые поля сущности, значения не трогает.
    Отсутствующие поля не добавляются (null из JSON считается присутствующим).
    """
    allowed = get_entity(entity).fields

    if not isinstance(payload, Mapping):
        return {}

    return {field: payload[field] for field in allowed if field in payload}
