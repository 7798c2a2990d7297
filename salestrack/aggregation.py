"""Dashboard summary statistics."""
from collections.abc import Iterable
from decimal import Decimal

from .event_models import Event, EventSummary, EventType


def summarize(events: Iterable[Event]) -> EventSummary:
    """Total value plus payment and upsell counts, in one pass."""
    total = Decimal(0)
    payments = upsells = 0
    for event in events:
        total += event.value
        if event.type == EventType.PAYMENT:
            payments += 1
        elif event.type == EventType.UPSELL:
            upsells += 1
    return EventSummary(total_value=total, payment_count=payments, upsell_count=upsells)
