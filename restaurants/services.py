import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from tableserve.exceptions import Conflict
from tables import registry

from .models import Restaurant

logger = logging.getLogger(__name__)


def onboard_restaurant(validated_data):
    """
    Create a restaurant and its tables.

    Raises:
        Conflict: if the admin_uid or email is already registered
    """
    data = dict(validated_data)
    password = data.pop('password')
    data.setdefault('table_count', settings.DEFAULT_TABLE_COUNT)

    if Restaurant.objects.filter(admin_uid=data['admin_uid']).exists():
        raise Conflict('Admin UID already exists')
    if Restaurant.objects.filter(email__iexact=data['email']).exists():
        raise Conflict('Email already registered')

    restaurant = Restaurant(**data)
    restaurant.set_password(password)

    try:
        with transaction.atomic():
            restaurant.save()
            registry.initialize(restaurant, restaurant.table_count)
    except IntegrityError:
        # Lost a race against a concurrent registration
        raise Conflict('Admin UID or email already registered')

    logger.info("Onboarded restaurant %s with %d tables", restaurant.admin_uid, restaurant.table_count)
    return restaurant


def update_restaurant(restaurant, validated_data):
    """
    Apply settings changes, syncing the table set when table_count changes.

    Changing the table count is refused while any table is occupied so that
    no active or billing table is deleted.
    """
    data = dict(validated_data)
    password = data.pop('password', None)
    new_count = data.get('table_count')
    count_changed = new_count is not None and new_count != restaurant.table_count

    if count_changed and registry.has_non_vacant_tables(restaurant):
        raise ValidationError({'table_count': [
            'Cannot change table count while tables are occupied. '
            'Please ensure all tables are vacant first.'
        ]})

    email = data.get('email')
    if email and Restaurant.objects.filter(email__iexact=email).exclude(pk=restaurant.pk).exists():
        raise Conflict('Email already registered')

    with transaction.atomic():
        for field, value in data.items():
            setattr(restaurant, field, value)
        if password:
            restaurant.set_password(password)
        restaurant.save()

        if count_changed:
            registry.sync(restaurant, new_count)

    return restaurant
