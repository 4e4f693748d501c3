"""
Общие модели для всех сервисов.
"""

from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from maasin_go.common.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """Базовая модель: snake_case в Python, camelCase на проводе."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def parse_payload(model: type[M], data: Any, what: str) -> M:
    """
    Проверяет тело запроса уже после проверки личности вызывающего.

    Raises:
        ValidationError: тело не объект или поля не проходят проверку
    """
    if isinstance(data, model):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError(f"Invalid {what}: expected a JSON object", details={"fields": []})
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ValidationError(
            f"Invalid {what}: {', '.join(fields)}",
            details={"fields": fields},
        ) from e


class ErrorResponse(CamelModel):
    """Стандартный ответ с ошибкой."""

    error: str
    error_code: str
    details: dict[str, Any] | None = None


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""

    service: str
    status: str = "healthy"  # healthy, degraded
    version: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
