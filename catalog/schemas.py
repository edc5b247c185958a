from typing import Annotated, List, Literal, Optional

from pydantic import Field, StringConstraints

from core.schemas import Amount, Insert, RecordId

Rarity = Literal['Common', 'Uncommon', 'Rare', 'Ultra Rare', 'Secret Rare', 'Grail']
Condition = Literal['Mint', 'Near Mint', 'Excellent', 'Good', 'Played']
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
ImageUrl = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=1000)]
OptionalUrl = Annotated[str, StringConstraints(strip_whitespace=True, max_length=1000)]


class CategoryInsert(Insert):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class CardInsert(Insert):
    name: Name
    set_name: Name
    rarity: Rarity
    condition: Condition
    price: Amount
    image: ImageUrl
    images: List[ImageUrl] = Field(default_factory=list)
    category_id: Optional[RecordId] = None
    collector_notes: Optional[str] = None
    featured: bool = False
    available: bool = True


class ServiceInsert(Insert):
    name: Name
    description: Optional[str] = None
    price: Optional[Amount] = None
    image: Optional[OptionalUrl] = None
    available: bool = True


class CatalogItem(Insert):
    """A card or a service as seen by the booking flow."""

    item_type: Literal['card', 'service']
    item_id: int
    name: str
    unit_price: Amount
    available: bool = True
