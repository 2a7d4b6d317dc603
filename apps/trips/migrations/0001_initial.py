# Generated manually for trips app

from decimal import Decimal
import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


def money(**kwargs):
    kwargs.setdefault('max_digits', 12)
    kwargs.setdefault('decimal_places', 2)
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(**kwargs)


def non_negative_money():
    return money(validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
        ('employees', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DailyTrip',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code', models.CharField(editable=False, max_length=20, unique=True)),
                ('driver_name', models.CharField(max_length=100)),
                ('date', models.DateField()),
                ('chain_sequence', models.PositiveIntegerField(editable=False)),
                ('is_product_transferred', models.BooleanField(default=False)),
                ('collection_amount', non_negative_money()),
                ('purchase_amount', non_negative_money()),
                ('expiry', non_negative_money()),
                ('discount', non_negative_money()),
                ('petrol', non_negative_money()),
                ('previous_balance', money()),
                ('total_amount', money()),
                ('net_total', money()),
                ('grand_total', money()),
                ('expiry_after_tax', money()),
                ('amount_to_be', money()),
                ('sales_difference', money()),
                ('profit', money()),
                ('balance', money()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('driver', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='trips', to='employees.employee')),
                ('previous_trip', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='next_trips', to='trips.dailytrip')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trips_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trips_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'daily_trips',
                'ordering': ['-date', '-chain_sequence'],
            },
        ),
        migrations.CreateModel(
            name='TripLine',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('product', 'Product'), ('transfer', 'Transferred out'), ('accepted', 'Accepted')], max_length=10)),
                ('position', models.PositiveIntegerField(default=0)),
                ('product_ref', models.CharField(max_length=64)),
                ('product_name', models.CharField(max_length=200)),
                ('category', models.CharField(max_length=10)),
                ('display_number', models.CharField(blank=True, max_length=10)),
                ('quantity', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('unit_price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('receiving_driver_name', models.CharField(blank=True, max_length=100)),
                ('transferred_from_driver_name', models.CharField(blank=True, max_length=100)),
                ('trip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lines', to='trips.dailytrip')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='trip_lines', to='catalog.product')),
                ('receiving_driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incoming_transfer_lines', to='employees.employee')),
                ('transferred_from_driver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='handed_over_lines', to='employees.employee')),
            ],
            options={
                'db_table': 'trip_lines',
                'ordering': ['trip', 'kind', 'position'],
            },
        ),
        migrations.AddConstraint(
            model_name='dailytrip',
            constraint=models.UniqueConstraint(fields=('driver', 'date'), name='daily_trips_driver_date_uniq'),
        ),
        migrations.AddIndex(
            model_name='dailytrip',
            index=models.Index(fields=['driver', 'date', 'chain_sequence'], name='daily_trips_chain_idx'),
        ),
        migrations.AddIndex(
            model_name='dailytrip',
            index=models.Index(fields=['date'], name='daily_trips_date_idx'),
        ),
        migrations.AddIndex(
            model_name='tripline',
            index=models.Index(fields=['trip', 'kind'], name='trip_lines_kind_idx'),
        ),
        migrations.AddIndex(
            model_name='tripline',
            index=models.Index(fields=['receiving_driver', 'kind'], name='trip_lines_receiver_idx'),
        ),
    ]
