from datetime import datetime, timezone as dt_timezone
from typing import Annotated, Optional

from django.utils import timezone
from pydantic import Field, StringConstraints, field_validator

from core.schemas import MAX_INT, Insert

from .models import normalize_code


class PromoCodeInsert(Insert):
    code: Annotated[str, StringConstraints(min_length=1, max_length=50)]
    discount_percent: int = Field(ge=1, le=100)
    active: bool = True
    usage_limit: Optional[int] = Field(default=None, ge=1, le=MAX_INT)
    expires_at: Optional[datetime] = None

    @field_validator('code', mode='before')
    @classmethod
    def normalize(cls, value):
        return normalize_code(value) if isinstance(value, str) else value

    @field_validator('expires_at')
    @classmethod
    def aware(cls, value):
        if value is not None and timezone.is_naive(value):
            return timezone.make_aware(value, dt_timezone.utc)
        return value


class PromoSnapshot(Insert):
    """The promo code terms frozen onto a booking at submission time."""

    code: str
    discount_percent: int = Field(ge=1, le=100)

    @classmethod
    def of(cls, promo):
        return cls(code=promo.code, discount_percent=promo.discount_percent)
