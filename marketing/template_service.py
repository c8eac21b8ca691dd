"""
SMS / Telegram template rendering

Renders {placeholder} tokens against customer and order context, and keeps
the configured default templates (settings.SMS_TEMPLATES) in the database.
"""
import re
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from django.conf import settings
from django.db.models import Count, Max, Sum

from accounts.identity import display_phone
from orders.models import Order, OrderItem
from .models import SmsTemplate

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r'\{([a-z0-9_]+)\}', re.IGNORECASE)

ORDER_VARIABLES = (
    'orderid', 'orderstatus', 'receiptstatus', 'branch', 'branchaddress',
    'pickupdate', 'trackinglink', 'total', 'itemid', 'itemids', 'itemlist',
    'itemcount', 'disapprovalreason',
)


def stringify(value) -> str:
    """Convert a variable value to the text substituted into a message"""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (str, int, float, Decimal)):
        return str(value).strip()
    return ''


def render(body: str, variables: Optional[Dict] = None) -> str:
    """
    Replace {token} occurrences with their variable values.
    Tokens are matched case-insensitively; unknown tokens are left as-is.
    """
    normalized = {
        str(key).lower(): stringify(value)
        for key, value in (variables or {}).items()
    }

    def replace(match):
        token = match.group(1).lower()
        return normalized.get(token, match.group(0))

    return TOKEN_PATTERN.sub(replace, body or '')


class SmsTemplateService:
    """Template lookup and placeholder context for customers and orders"""

    render = staticmethod(render)

    def render_named(self, key: str, variables: Optional[Dict] = None, fallback: Optional[str] = None) -> str:
        body = self.template_body(key)
        if not body:
            body = fallback or ''
        return render(body, variables)

    def template_body(self, key: str) -> str:
        """Active stored body for key, else the configured default body"""
        self.sync_default_templates()

        template = SmsTemplate.objects.filter(key=key, is_active=True).first()
        if template and template.body.strip():
            return template.body

        configured = getattr(settings, 'SMS_TEMPLATES', {}).get(key) or {}
        body = configured.get('body') if isinstance(configured, dict) else None
        return body if isinstance(body, str) else ''

    # ============ Variables ============

    def variables_for_customer(self, customer, order: Optional[Order] = None, orders=None) -> Dict[str, str]:
        """
        Placeholder context for a customer.

        `order` pins the order context; otherwise the customer's latest order
        is used. `orders` restricts the orders considered (e.g. to the
        actor's branches); it defaults to all of the customer's orders.
        """
        if orders is None:
            orders = customer.orders.all()
        orders = orders.filter(customer=customer)

        recent_order = order or self.resolve_recent_order(orders)

        variables = dict.fromkeys(ORDER_VARIABLES, '')
        variables.update({
            'name': customer.name or '',
            'phone': display_phone(customer.phone),
            'recent_item': self.resolve_recent_item(recent_order),
            'recent_branch': recent_order.branch.name if recent_order and recent_order.branch_id else '',
            'freq_item': self.resolve_frequent_item(orders),
            'freq_branch': self.resolve_frequent_branch(orders),
        })
        if recent_order:
            variables.update(self.variables_for_order(recent_order))
        return variables

    def variables_for_order(self, order: Order) -> Dict[str, str]:
        items = list(order.items.all())
        item_ids = [str(item.menu_item_id) for item in items if item.menu_item_id]
        customer = order.customer
        branch = order.branch

        return {
            'name': customer.name if customer else '',
            'phone': display_phone(customer.phone) if customer else '',
            'orderid': str(order.pk),
            'orderstatus': order.order_status or '',
            'receiptstatus': order.receipt_status or '',
            'branch': branch.name if branch else '',
            'branchaddress': (branch.address or '') if branch else '',
            'pickupdate': order.pickup_date.isoformat() if order.pickup_date else '',
            'trackinglink': self.tracking_link(order),
            'total': f"{Decimal(order.total_amount or 0):.2f}",
            'itemid': item_ids[0] if item_ids else '',
            'itemids': ','.join(item_ids),
            'itemlist': ', '.join(f"{item.display_name} x{item.quantity}" for item in items),
            'itemcount': str(sum(item.quantity for item in items)),
            'disapprovalreason': order.disapproval_reason or '',
        }

    def tracking_link(self, order: Order) -> str:
        url_template = getattr(settings, 'TRACKING_URL_TEMPLATE', '')
        if not url_template or not order.tracking_token:
            return ''
        return url_template.format(token=order.tracking_token)

    def resolve_recent_order(self, orders) -> Optional[Order]:
        return (
            orders.select_related('customer', 'branch')
            .prefetch_related('items__menu_item')
            .order_by('-created_at', '-pk')
            .first()
        )

    def resolve_recent_item(self, order: Optional[Order]) -> str:
        """Highest-quantity line of the order; later lines win ties"""
        if not order:
            return ''
        items = sorted(order.items.all(), key=lambda item: (item.quantity, item.pk), reverse=True)
        return items[0].display_name if items else ''

    def resolve_frequent_item(self, orders) -> str:
        row = (
            OrderItem.objects.filter(order__in=orders.values('pk'))
            .values('menu_item_id', 'menu_item__name')
            .annotate(total_quantity=Sum('quantity'), latest_purchase_at=Max('order__created_at'))
            .order_by('-total_quantity', '-latest_purchase_at')
            .first()
        )
        if not row:
            return ''
        return row['menu_item__name'] or f"Item #{row['menu_item_id']}"

    def resolve_frequent_branch(self, orders) -> str:
        row = (
            orders.values('branch_id', 'branch__name')
            .annotate(total_orders=Count('pk'), latest_order_at=Max('created_at'))
            .order_by('-total_orders', '-latest_order_at')
            .first()
        )
        return (row['branch__name'] or '') if row else ''

    # ============ Stored Templates ============

    def configured_templates(self) -> List[Dict]:
        output = []
        for key, template in getattr(settings, 'SMS_TEMPLATES', {}).items():
            if not isinstance(template, dict):
                continue
            body = str(template.get('body') or '').strip()
            if not body:
                continue
            output.append({
                'key': str(key),
                'label': str(template.get('label') or key),
                'body': body,
                'is_active': True,
            })
        return output

    def sync_default_templates(self) -> int:
        """Insert configured templates that are missing. Returns the number created."""
        created_count = 0
        for template in self.configured_templates():
            _, created = SmsTemplate.objects.get_or_create(
                key=template['key'],
                defaults={
                    'label': template['label'],
                    'body': template['body'],
                    'is_active': template['is_active'],
                }
            )
            if created:
                created_count += 1
                logger.info(f"Created default SMS template {template['key']}")
        return created_count

    def templates(self, include_inactive: bool = False) -> List[Dict]:
        self.sync_default_templates()

        queryset = SmsTemplate.objects.order_by('key')
        if not include_inactive:
            queryset = queryset.filter(is_active=True)

        return [
            {
                'id': template.pk,
                'key': template.key,
                'label': template.label,
                'body': template.body,
                'is_active': template.is_active,
            }
            for template in queryset
        ]

    def placeholders(self) -> List[Dict[str, str]]:
        placeholders = getattr(settings, 'SMS_PLACEHOLDERS', {})
        if not isinstance(placeholders, dict):
            return []
        return [
            {'token': str(token), 'description': str(description)}
            for token, description in placeholders.items()
        ]
