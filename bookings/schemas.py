from typing import Annotated, Literal, Optional

from pydantic import Field, StringConstraints, field_validator, model_validator

from catalog.schemas import CatalogItem
from core.schemas import Amount, Insert, RecordId
from promotions.pricing import MAX_QUANTITY, coerce_quantity, compute_total
from promotions.schemas import PromoSnapshot

FullName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=254)]


class ContactDetails(Insert):
    full_name: FullName
    phone: Phone
    email: Email
    quantity: int = Field(default=1, le=MAX_QUANTITY)
    message: Optional[str] = None

    @field_validator('quantity', mode='before')
    @classmethod
    def default_quantity(cls, value):
        return coerce_quantity(value)

    @field_validator('message', mode='before')
    @classmethod
    def blank_message(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class BookingSubmission(ContactDetails):
    """What the storefront sends when a customer requests an item."""

    item_type: Literal['card', 'service'] = 'card'
    item_id: RecordId
    promo_code: Optional[str] = None


class BookingRequestInsert(ContactDetails):
    """A booking ready to persist: item and promo snapshots plus the frozen price."""

    item: CatalogItem
    promo: Optional[PromoSnapshot] = None
    final_price: Amount

    @model_validator(mode='after')
    def price_matches(self):
        percent = self.promo.discount_percent if self.promo else 0
        expected = compute_total(self.item.unit_price, self.quantity, percent).final_price
        if self.final_price != expected:
            raise ValueError(f'final_price must be {expected}')
        return self
