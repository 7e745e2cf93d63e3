from django.contrib import admin

from ticketing.models import Event, Registration, TicketType


class TicketTypeInline(admin.TabularInline):
    model = TicketType
    extra = 1
    readonly_fields = ["sold"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "location", "target_date", "created_by"]
    search_fields = ["title", "location"]
    inlines = [TicketTypeInline]


@admin.register(TicketType)
class TicketTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "is_free", "price", "quantity", "sold"]
    list_filter = ["event", "is_free"]
    readonly_fields = ["sold"]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["user_id", "event", "ticket_type", "registered_at"]
    list_filter = ["event"]
    readonly_fields = ["user_id", "event", "ticket_type", "registered_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
