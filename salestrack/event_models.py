from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
import uuid


class EventType(str, Enum):
    PAYMENT = "payment"
    UPSELL = "upsell"


class EventCreate(BaseModel):
    """Validated payload for creating an event."""
    model_config = ConfigDict(frozen=True)

    type: EventType
    name: str
    email: EmailStr
    value: Decimal
    timestamp: datetime | None = None


class Event(BaseModel):
    """A stored event as returned by the store and the API."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: EventType
    name: str
    email: str
    value: Decimal
    timestamp: datetime
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
    )

    @field_serializer("value", when_used="json")
    def _value_as_number(self, value: Decimal) -> float:
        return float(value)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class EventSummary(BaseModel):
    """Dashboard statistics over a result set."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_value: Decimal = Field(default=Decimal(0), alias="totalValue")
    payment_count: int = Field(default=0, alias="paymentCount")
    upsell_count: int = Field(default=0, alias="upsellCount")

    @field_serializer("total_value", when_used="json")
    def _total_as_number(self, value: Decimal) -> float:
        return float(value)
