"""
Журнал отзывов пассажиров.

Записи только добавляются. Ключ: feedback:{epoch_millis}_{passenger_id}.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from maasin_go.common.constants import FEEDBACK_KEY_PREFIX, TypeMsg
from maasin_go.common.errors import Unauthenticated, ValidationError
from maasin_go.common.logger import log_info
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.shared.models.common import parse_payload
from maasin_go.shared.models.feedback_dto import FeedbackRecord, FeedbackRequest
from maasin_go.shared.models.user_dto import Identity

MIN_RATING = 1
MAX_RATING = 5


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_rating(rating: Any) -> int:
    """Оценка: целое от 1 до 5. bool и дробные числа не принимаются."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer between 1 and 5", details={"fields": ["rating"]})
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}",
            details={"fields": ["rating"]},
        )
    return rating


class FeedbackService:
    def __init__(self, store: KeyValueStore, *, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self._clock = clock

    async def record_feedback(
        self,
        passenger_id: str,
        rating: Any,
        plate_number: str | None = None,
        comment: str | None = None,
        driver_id: str | None = None,
    ) -> FeedbackRecord:
        """
        Добавляет неизменяемый отзыв.

        Raises:
            Unauthenticated: нет id пассажира
            ValidationError: оценка вне 1..5 или повтор в ту же миллисекунду
            StoreUnavailable: сбой хранилища
        """
        if not passenger_id:
            raise Unauthenticated("Unauthorized")
        rating = validate_rating(rating)

        created_at = self._clock()
        millis = int(created_at.timestamp() * 1000)
        key = f"{FEEDBACK_KEY_PREFIX}{millis}_{passenger_id}"

        record = FeedbackRecord(
            id=key,
            passenger_id=passenger_id,
            driver_id=driver_id or None,
            plate_number=plate_number or None,
            rating=rating,
            comment=comment or None,
            created_at=created_at,
        )

        created = await self.store.add(key, record.model_dump_json(by_alias=True))
        if not created:
            raise ValidationError("Feedback already submitted, please try again")

        await log_info(
            f"Отзыв {key}: оценка {rating}",
            type_msg=TypeMsg.DEBUG,
            extra={"passenger_id": passenger_id, "driver_id": driver_id},
        )
        return record

    async def submit(self, identity: Identity | None, payload: FeedbackRequest | Mapping[str, Any]) -> FeedbackRecord:
        """
        Отзыв от имени аутентифицированного пассажира.
        Тело проверяется только после проверки личности.
        """
        if identity is None:
            raise Unauthenticated("Unauthorized")

        request = parse_payload(FeedbackRequest, payload, "feedback")
        return await self.record_feedback(
            identity.user_id,
            request.rating,
            plate_number=request.plate_number,
            comment=request.comment,
            driver_id=request.driver_id,
        )
