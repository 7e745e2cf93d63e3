"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models
from django.utils import timezone


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255)
    target_date = models.DateTimeField()
    date_display = models.CharField(max_length=100, blank=True, default="")
    time_display = models.CharField(max_length=100, blank=True, default="")
    created_by = models.UUIDField(editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-target_date"]
        indexes = [
            models.Index(fields=["created_by", "-target_date"], name="event_owner_date_idx"),
        ]

    def __str__(self) -> str:
        return self.title


class TicketType(models.Model):
    """Persistence model for ticket types."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="ticket_types"
    )
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default="")
    is_free = models.BooleanField(default=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    quantity = models.PositiveIntegerField()
    sold = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["event"], name="ticket_type_event_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(sold__lte=models.F("quantity")),
                name="ticket_type_sold_lte_quantity",
            ),
            models.CheckConstraint(
                condition=models.Q(is_free=False) | models.Q(price=0),
                name="ticket_type_free_has_zero_price",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Registration(models.Model):
    """Persistence model for registrations."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField()
    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name="registrations"
    )
    ticket_type = models.ForeignKey(
        TicketType,
        on_delete=models.RESTRICT,
        related_name="registrations",
        null=True,
        blank=True,
    )
    registered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-registered_at"]
        indexes = [
            models.Index(fields=["event", "-registered_at"], name="registration_event_date_idx"),
            models.Index(fields=["user_id", "-registered_at"], name="registration_user_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "event"],
                name="registration_unique_user_event",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.event_id}"
