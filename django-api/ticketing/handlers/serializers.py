"""Serializers for request parsing and for transforming domain models to API responses.

Input serializers only check shape and types; field rules (lengths, ranges,
free/price coupling) are enforced by the domain layer.
"""

from rest_framework import serializers

from ticketing.domain import EventDraft, TicketTypeDraft, TicketTypePatch


class EventInputSerializer(serializers.Serializer):
    title = serializers.CharField(allow_blank=True, trim_whitespace=False)
    location = serializers.CharField(allow_blank=True, trim_whitespace=False)
    target_date = serializers.DateTimeField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    date_display = serializers.CharField(required=False, allow_blank=True, default="")
    time_display = serializers.CharField(required=False, allow_blank=True, default="")

    def to_draft(self) -> EventDraft:
        return EventDraft(**self.validated_data)


class TicketTypeInputSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_free = serializers.BooleanField(required=False, default=True)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=0
    )
    quantity = serializers.IntegerField()

    def to_draft(self) -> TicketTypeDraft:
        return TicketTypeDraft(**self.validated_data)


class TicketTypePatchSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_free = serializers.BooleanField(required=False)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    quantity = serializers.IntegerField(required=False)

    def to_patch(self) -> TicketTypePatch:
        return TicketTypePatch(**self.validated_data)


class RegistrationInputSerializer(serializers.Serializer):
    ticket_type_id = serializers.CharField(required=False, allow_null=True, default=None)


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField()
    target_date = serializers.DateTimeField()
    date_display = serializers.CharField()
    time_display = serializers.CharField()
    created_by = serializers.UUIDField(source="created_by.value")
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    is_free = serializers.BooleanField()
    price = serializers.DecimalField(source="price.amount", max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField(source="quantity.value")
    sold = serializers.IntegerField(source="sold.value")
    remaining = serializers.IntegerField()
    created_at = serializers.DateTimeField()


class RegistrationSerializer(serializers.Serializer):
    """Serializer for Registration domain model."""

    id = serializers.UUIDField(source="id.value")
    user_id = serializers.UUIDField(source="user_id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    ticket_type_id = serializers.SerializerMethodField()
    registered_at = serializers.DateTimeField()

    def get_ticket_type_id(self, obj) -> str | None:
        return str(obj.ticket_type_id) if obj.ticket_type_id else None


class RegisteredEventSerializer(serializers.Serializer):
    registration = RegistrationSerializer()
    event = EventSerializer()


class TicketTypeStatsSerializer(serializers.Serializer):
    ticket_type = TicketTypeSerializer()
    sell_through = serializers.FloatField()


class OrganizerSummarySerializer(serializers.Serializer):
    total_events = serializers.IntegerField()
    total_registrations = serializers.IntegerField()
    upcoming_events = serializers.IntegerField()
    avg_registrations = serializers.IntegerField()


class TicketSummarySerializer(serializers.Serializer):
    total_capacity = serializers.IntegerField()
    total_sold = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    free_types = serializers.IntegerField()
    paid_types = serializers.IntegerField()


class EventRankingSerializer(serializers.Serializer):
    event_id = serializers.CharField()
    title = serializers.CharField()
    registrations = serializers.IntegerField()


class TrendPointSerializer(serializers.Serializer):
    start = serializers.DateField()
    count = serializers.IntegerField()


class OrganizerDashboardSerializer(serializers.Serializer):
    summary = OrganizerSummarySerializer()
    tickets = TicketSummarySerializer()
    top_events = EventRankingSerializer(many=True)
    trend = TrendPointSerializer(many=True)


class OrganizerAttendeesSerializer(serializers.Serializer):
    recent = RegisteredEventSerializer(many=True)
    total_attendees = serializers.IntegerField()
    new_this_week = serializers.IntegerField()
    unique_events = serializers.IntegerField()
