import uuid

import django.db.models.deletion
from django.db import migrations, models


PAYMENT_MODE_CHOICES = [('cash', 'Cash'), ('upi', 'UPI'), ('card', 'Card'), ('wallet', 'Wallet')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('restaurants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BillSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('last', models.PositiveIntegerField(default=0)),
                ('restaurant', models.OneToOneField(db_column='admin_uid', on_delete=django.db.models.deletion.CASCADE, related_name='bill_sequence', to='restaurants.restaurant', to_field='admin_uid')),
            ],
        ),
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('bill_number', models.CharField(max_length=32)),
                ('session_id', models.CharField(db_index=True, max_length=64)),
                ('table_number', models.PositiveIntegerField()),
                ('items', models.JSONField(default=list)),
                ('subtotal', models.DecimalField(decimal_places=2, max_digits=12)),
                ('discount_percentage', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('discount_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('service_charge_percentage', models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ('service_charge_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('payment_mode', models.CharField(choices=PAYMENT_MODE_CHOICES, default='cash', max_length=10)),
                ('is_final', models.BooleanField(default=False)),
                ('generated_at', models.DateTimeField(auto_now_add=True)),
                ('finalized_at', models.DateTimeField(blank=True, null=True)),
                ('restaurant', models.ForeignKey(db_column='admin_uid', on_delete=django.db.models.deletion.CASCADE, related_name='bills', to='restaurants.restaurant', to_field='admin_uid')),
            ],
            options={
                'ordering': ['-generated_at'],
                'indexes': [models.Index(fields=['restaurant', 'is_final'], name='bill_final_idx')],
                'constraints': [
                    models.UniqueConstraint(fields=('restaurant', 'bill_number'), name='uniq_bill_number_per_restaurant'),
                ],
            },
        ),
        migrations.CreateModel(
            name='SalesHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('table_number', models.PositiveIntegerField()),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('items_sold', models.JSONField(default=list)),
                ('payment_mode', models.CharField(choices=PAYMENT_MODE_CHOICES, max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('bill', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='sale', to='billing.bill')),
                ('restaurant', models.ForeignKey(db_column='admin_uid', on_delete=django.db.models.deletion.CASCADE, related_name='sales', to='restaurants.restaurant', to_field='admin_uid')),
            ],
            options={
                'verbose_name_plural': 'sales history',
                'ordering': ['-created_at'],
            },
        ),
    ]
