"""
Audience preview for promo campaigns

Read-only summary and sample of the customers a campaign would reach.
"""
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Avg
from django.utils import timezone

from accounts.identity import display_phone
from accounts.models import Customer
from orders.models import Order
from organizations.rbac import scope_orders
from .audience import build_audience, ordered
from .template_service import SmsTemplateService, stringify


def _round(value) -> float:
    return round(float(value or 0), 2)


def _money(value) -> float:
    return float(value if value is not None else Decimal('0'))


def preview_audience(actor, spec, now=None, template_service=None) -> dict:
    """
    Summary counts plus the top customers with their rendered variables.

    Raises AudienceRangeError when a min/max pair is inverted.
    """
    now = now or timezone.now()
    template_service = template_service or SmsTemplateService()
    high_value_threshold = getattr(settings, 'PROMO_HIGH_VALUE_THRESHOLD', 2000)
    dormant_days = getattr(settings, 'PROMO_DORMANT_DAYS', 90)
    sample_size = getattr(settings, 'PROMO_SAMPLE_SIZE', 20)

    audience = build_audience(actor, spec, now=now)

    averages = audience.aggregate(
        average_orders=Avg('orders_count'),
        average_spent=Avg('total_spent'),
    )
    summary = {
        'matched_customers': audience.count(),
        'high_value_customers': audience.filter(total_spent__gte=high_value_threshold).count(),
        'dormant_customers': audience.filter(
            last_order_at__isnull=False,
            last_order_at__lt=now - timedelta(days=dormant_days),
        ).count(),
        'average_orders_per_customer': _round(averages['average_orders']),
        'average_total_spent': _round(averages['average_spent']),
    }

    rows = list(ordered(audience)[:sample_size])
    customers = Customer.objects.in_bulk([row.pk for row in rows])
    scoped_orders = scope_orders(Order.objects.all(), actor)

    sample = []
    for row in rows:
        customer = customers.get(row.pk)
        variables = {}
        if customer is not None:
            customer_orders = scoped_orders.filter(customer=customer)
            latest_order = template_service.resolve_recent_order(customer_orders)
            variables = {
                str(key): stringify(value)
                for key, value in template_service.variables_for_customer(
                    customer, latest_order, orders=customer_orders
                ).items()
            }

        last_order_at = row.last_order_at
        sample.append({
            'id': row.pk,
            'name': row.name,
            'phone': display_phone(row.phone),
            'telegram_username': row.telegram_username or None,
            'orders_count': row.orders_count,
            'total_spent': _money(row.total_spent),
            'average_order_value': _round(row.average_order_value),
            'last_order_at': timezone.localtime(last_order_at).strftime('%Y-%m-%d %H:%M:%S') if last_order_at else None,
            'recency_days': (now - last_order_at).days if last_order_at else None,
            'preview_variables': variables,
        })

    return {'summary': summary, 'sample': sample}
