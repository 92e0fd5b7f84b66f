import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("orders", "0001_initial"),
        ("tables", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="order",
            name="table",
            field=models.ForeignKey(
                blank=True,
                help_text="Table the order was seated at. Required for dine-in orders.",
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="orders",
                to="tables.table",
            ),
        ),
    ]
