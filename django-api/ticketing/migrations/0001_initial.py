import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("location", models.CharField(max_length=255)),
                ("target_date", models.DateTimeField()),
                ("date_display", models.CharField(blank=True, default="", max_length=100)),
                ("time_display", models.CharField(blank=True, default="", max_length=100)),
                ("created_by", models.UUIDField(editable=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-target_date"],
                "indexes": [models.Index(fields=["created_by", "-target_date"], name="event_owner_date_idx")],
            },
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100)),
                ("description", models.CharField(blank=True, default="", max_length=500)),
                ("is_free", models.BooleanField(default=True)),
                ("price", models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ("quantity", models.PositiveIntegerField()),
                ("sold", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ticket_types",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["event"], name="ticket_type_event_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("sold__lte", models.F("quantity"))),
                        name="ticket_type_sold_lte_quantity",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("is_free", False), ("price", 0), _connector="OR"),
                        name="ticket_type_free_has_zero_price",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("user_id", models.UUIDField()),
                ("registered_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="ticketing.event",
                    ),
                ),
                (
                    "ticket_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="registrations",
                        to="ticketing.tickettype",
                    ),
                ),
            ],
            options={
                "ordering": ["-registered_at"],
                "indexes": [
                    models.Index(fields=["event", "-registered_at"], name="registration_event_date_idx"),
                    models.Index(fields=["user_id", "-registered_at"], name="registration_user_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user_id", "event"),
                        name="registration_unique_user_event",
                    ),
                ],
            },
        ),
    ]
