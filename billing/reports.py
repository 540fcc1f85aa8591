"""Read-only sales reporting over the sales history."""
import datetime
from collections import OrderedDict
from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from .models import SalesHistory

DEFAULT_RANGE_DAYS = 30


def today_sales(admin_uid, today=None):
    today = today or timezone.localdate()
    totals = SalesHistory.objects.filter(restaurant_id=admin_uid, created_at__date=today).aggregate(
        total_sales=Sum('total_amount'),
        order_count=Count('id'),
    )
    return {
        'date': today,
        'total_sales': totals['total_sales'] or Decimal('0.00'),
        'order_count': totals['order_count'],
    }


def sales_by_day(admin_uid, start_date=None, end_date=None):
    """
    Per-day totals between start_date and end_date inclusive, defaulting to
    the last DEFAULT_RANGE_DAYS days. Days without sales are omitted.

    Returns:
        List of {"date", "total_sales", "order_count", "items_sold"} where
        items_sold maps item name to quantity sold that day
    """
    end_date = end_date or timezone.localdate()
    start_date = start_date or end_date - datetime.timedelta(days=DEFAULT_RANGE_DAYS - 1)

    sales = (
        SalesHistory.objects
        .filter(restaurant_id=admin_uid, created_at__date__gte=start_date, created_at__date__lte=end_date)
        .annotate(day=TruncDate('created_at'))
        .order_by('created_at')
    )

    days = OrderedDict()
    for sale in sales:
        day = days.setdefault(sale.day, {
            'date': sale.day,
            'total_sales': Decimal('0.00'),
            'order_count': 0,
            'items_sold': {},
        })
        day['total_sales'] += sale.total_amount
        day['order_count'] += 1
        for item in sale.items_sold:
            day['items_sold'][item['name']] = day['items_sold'].get(item['name'], 0) + item['quantity']
    return list(days.values())
