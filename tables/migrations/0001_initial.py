import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('restaurants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Table',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('table_number', models.PositiveIntegerField()),
                ('status', models.CharField(choices=[('vacant', 'Vacant'), ('active', 'Active'), ('billing', 'Billing')], default='vacant', max_length=10)),
                ('active_session_id', models.CharField(blank=True, max_length=64, null=True)),
                ('otp', models.CharField(max_length=4)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('restaurant', models.ForeignKey(db_column='admin_uid', on_delete=django.db.models.deletion.CASCADE, related_name='tables', to='restaurants.restaurant', to_field='admin_uid')),
            ],
            options={
                'ordering': ['table_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('restaurant', 'table_number'), name='uniq_table_number_per_restaurant'),
                    models.CheckConstraint(condition=models.Q(models.Q(('active_session_id__isnull', True), ('status', 'vacant')), models.Q(models.Q(('status', 'vacant'), _negated=True), ('active_session_id__isnull', False)), _connector='OR'), name='table_vacant_iff_no_session'),
                ],
            },
        ),
    ]
