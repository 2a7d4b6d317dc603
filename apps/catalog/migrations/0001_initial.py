# Generated manually for catalog app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code', models.CharField(editable=False, max_length=20, unique=True)),
                ('display_number', models.CharField(db_index=True, max_length=10)),
                ('name', models.CharField(max_length=200)),
                ('category', models.CharField(choices=[('bakery', 'Bakery'), ('fresh', 'Fresh')], max_length=10)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('description', models.TextField(blank=True)),
                ('sku', models.CharField(blank=True, max_length=50)),
                ('unit', models.CharField(default='pcs', max_length=20)),
                ('minimum_quantity', models.PositiveIntegerField(default=0)),
                ('maximum_quantity', models.PositiveIntegerField(blank=True, null=True)),
                ('expiry_days', models.PositiveIntegerField(blank=True, null=True)),
                ('supplier', models.CharField(blank=True, max_length=200)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products_created', to=settings.AUTH_USER_MODEL)),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products_updated', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['category', 'display_number'],
                'indexes': [
                    models.Index(fields=['category', 'display_number'], name='products_category_display_idx'),
                    models.Index(fields=['is_active'], name='products_active_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PriceHistoryEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('version', models.PositiveIntegerField()),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[MinValueValidator(Decimal('0.00'))])),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='price_history', to='catalog.product')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='price_changes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'product_price_history',
                'ordering': ['product', 'version'],
                'verbose_name_plural': 'price history entries',
                'unique_together': {('product', 'version')},
                'indexes': [
                    models.Index(fields=['product', 'updated_at'], name='price_history_product_idx'),
                ],
            },
        ),
    ]
