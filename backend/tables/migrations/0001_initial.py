import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Table",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.CharField(help_text="Number shown on the floor plan.", max_length=20, unique=True)),
                ("capacity", models.PositiveIntegerField(default=4)),
                (
                    "location",
                    models.CharField(blank=True, help_text="Floor area, e.g. 'Main Hall' or 'Terrace'.", max_length=50),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("occupied", "Occupied"),
                            ("reserved", "Reserved"),
                            ("cleaning", "Cleaning"),
                        ],
                        db_index=True,
                        default="available",
                        max_length=10,
                    ),
                ),
                (
                    "reserved_for",
                    models.CharField(blank=True, help_text="Name the reservation is held under.", max_length=100, null=True),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "current_order",
                    models.ForeignKey(
                        blank=True,
                        help_text="Order currently seated at this table.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Table",
                "verbose_name_plural": "Tables",
                "ordering": ["location", "number"],
                "indexes": [models.Index(fields=["status", "number"], name="table_status_number_idx")],
            },
        ),
    ]
