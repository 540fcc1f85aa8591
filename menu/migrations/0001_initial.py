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
            name='MenuItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('category', models.CharField(choices=[('veg', 'Veg'), ('nonveg', 'Non-Veg'), ('cake', 'Cake'), ('liquor', 'Liquor'), ('drinks', 'Drinks')], max_length=20)),
                ('subcategory', models.CharField(blank=True, max_length=40, null=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('image_url', models.URLField(blank=True, max_length=500, null=True)),
                ('ingredients', models.JSONField(blank=True, default=list)),
                ('calories', models.PositiveIntegerField(blank=True, null=True)),
                ('is_available', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('restaurant', models.ForeignKey(db_column='admin_uid', on_delete=django.db.models.deletion.CASCADE, related_name='menu_items', to='restaurants.restaurant', to_field='admin_uid')),
            ],
            options={
                'ordering': ['category', 'name'],
            },
        ),
    ]
