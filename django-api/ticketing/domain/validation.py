"""Field rules for ticket types and events.

Rules are checked in a fixed order (name, description, price, quantity) and
the first failure is reported, mirroring how the organizer form surfaces a
single message at a time.
"""

from decimal import Decimal, InvalidOperation

from ticketing.domain.errors import ValidationError
from ticketing.domain.models import EventDraft, TicketTypeDraft
from ticketing.domain.value_objects import MAX_PRICE, MAX_QUANTITY, MIN_QUANTITY

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
TITLE_MAX_LENGTH = 200
LOCATION_MAX_LENGTH = 255


def _to_decimal(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("price", "Price must be a number") from None
    if not amount.is_finite():
        raise ValidationError("price", "Price must be a number")
    return amount


def validate_ticket_type(draft: TicketTypeDraft) -> TicketTypeDraft:
    """Return a normalized copy of ``draft`` or raise ValidationError.

    Names and descriptions are trimmed. A free ticket always ends up with a
    price of zero, whatever price was typed before the toggle.
    """
    name = (draft.name or "").strip()
    if not name:
        raise ValidationError("name", "Ticket name is required")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError("name", "Name must be less than 100 characters")

    description = (draft.description or "").strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError("description", "Description must be less than 500 characters")

    price = Decimal("0") if draft.is_free else _to_decimal(draft.price)
    if price < 0:
        raise ValidationError("price", "Price cannot be negative")
    if price > MAX_PRICE:
        raise ValidationError("price", "Price is too high")

    quantity = draft.quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity", "Quantity must be a whole number")
    if quantity < MIN_QUANTITY:
        raise ValidationError("quantity", "Quantity must be at least 1")
    if quantity > MAX_QUANTITY:
        raise ValidationError("quantity", "Quantity is too high")

    return TicketTypeDraft(
        name=name,
        description=description,
        is_free=bool(draft.is_free),
        price=price,
        quantity=quantity,
    )


def validate_event(draft: EventDraft) -> EventDraft:
    title = (draft.title or "").strip()
    if not title:
        raise ValidationError("title", "Event title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError("title", "Title must be less than 200 characters")

    location = (draft.location or "").strip()
    if not location:
        raise ValidationError("location", "Location is required")
    if len(location) > LOCATION_MAX_LENGTH:
        raise ValidationError("location", "Location must be less than 255 characters")

    if draft.target_date is None:
        raise ValidationError("target_date", "Event date is required")
    if draft.target_date.tzinfo is None:
        raise ValidationError("target_date", "Event date must include a timezone")

    return EventDraft(
        title=title,
        location=location,
        target_date=draft.target_date,
        description=(draft.description or "").strip(),
        date_display=(draft.date_display or "").strip(),
        time_display=(draft.time_display or "").strip(),
    )
