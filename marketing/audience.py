"""
Promo Audience Builder

Turns a campaign filter (platform, search, branches, menu items, recency,
order/spend ranges) into an annotated Customer queryset, one row per
customer, with order aggregates restricted to the actor's branch scope.

Each filter is a small function applied in a fixed pipeline order; the
aggregate ranges run last as HAVING filters over the computed rows.
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.db.models import Avg, Count, Exists, Max, OuterRef, Q, Sum
from django.utils import timezone

from accounts.models import Customer
from orders.models import Order
from organizations.rbac import get_user_branch_ids, scope_orders

logger = logging.getLogger(__name__)

PLATFORM_SMS = 'sms'
PLATFORM_TELEGRAM = 'telegram'
PLATFORMS = (PLATFORM_SMS, PLATFORM_TELEGRAM)


class AudienceRangeError(ValueError):
    """A min/max filter pair where min is greater than max"""

    @property
    def message(self):
        return self.args[0] if self.args else ''


def _to_int(value) -> Optional[int]:
    if value is None or value == '':
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _to_id_list(value) -> List[int]:
    if value is None or value == '':
        return []
    if isinstance(value, str):
        value = value.split(',')
    elif not hasattr(value, '__iter__'):
        # A single id or model instance; querysets and lists iterate as-is
        value = [value]

    ids = []
    for item in value:
        item_id = _to_int(getattr(item, 'pk', item))
        if item_id is not None and item_id > 0 and item_id not in ids:
            ids.append(item_id)
    return ids


@dataclass
class CampaignFilterSpec:
    """Targeting filters for a promo campaign"""
    platform: str = PLATFORM_SMS
    search: str = ''
    branch_ids: List[int] = field(default_factory=list)
    include_menu_item_ids: List[int] = field(default_factory=list)
    exclude_menu_item_ids: List[int] = field(default_factory=list)
    orders_min: Optional[int] = None
    orders_max: Optional[int] = None
    recency_min_days: Optional[int] = None
    recency_max_days: Optional[int] = None
    total_spent_min: Optional[Decimal] = None
    total_spent_max: Optional[Decimal] = None
    avg_order_value_min: Optional[Decimal] = None
    avg_order_value_max: Optional[Decimal] = None

    @classmethod
    def from_data(cls, data) -> 'CampaignFilterSpec':
        """Build a filter from cleaned form data or a plain mapping (e.g. JSON)"""
        platform = str(data.get('platform') or PLATFORM_SMS).strip().lower()
        return cls(
            platform=platform,
            search=str(data.get('search') or '').strip(),
            branch_ids=_to_id_list(data.get('branch_ids')),
            include_menu_item_ids=_to_id_list(data.get('include_menu_item_ids')),
            exclude_menu_item_ids=_to_id_list(data.get('exclude_menu_item_ids')),
            orders_min=_to_int(data.get('orders_min')),
            orders_max=_to_int(data.get('orders_max')),
            recency_min_days=_to_int(data.get('recency_min_days')),
            recency_max_days=_to_int(data.get('recency_max_days')),
            total_spent_min=_to_decimal(data.get('total_spent_min')),
            total_spent_max=_to_decimal(data.get('total_spent_max')),
            avg_order_value_min=_to_decimal(data.get('avg_order_value_min')),
            avg_order_value_max=_to_decimal(data.get('avg_order_value_max')),
        )


# Checked in this order; the first violation wins
RANGE_CHECKS = (
    ('orders_min', 'orders_max',
     'Order range is invalid. Min orders cannot be greater than max orders.'),
    ('recency_min_days', 'recency_max_days',
     'Recency window is invalid. Min days cannot be greater than max days.'),
    ('total_spent_min', 'total_spent_max',
     'Total spend range is invalid. Min spend cannot be greater than max spend.'),
    ('avg_order_value_min', 'avg_order_value_max',
     'Average order value range is invalid. Min AOV cannot be greater than max AOV.'),
)


def validate_ranges(spec: CampaignFilterSpec) -> Optional[str]:
    """Return the first min > max violation message, or None"""
    for min_field, max_field, message in RANGE_CHECKS:
        minimum = getattr(spec, min_field)
        maximum = getattr(spec, max_field)
        if minimum is not None and maximum is not None and minimum > maximum:
            return message
    return None


def check_ranges(spec: CampaignFilterSpec) -> None:
    message = validate_ranges(spec)
    if message:
        raise AudienceRangeError(message)


def effective_branch_ids(actor, requested_ids) -> List[int]:
    """
    Requested branch ids the actor may use.
    Admins keep every requested id; other staff keep only their own branches.
    """
    allowed = get_user_branch_ids(actor)
    requested = _to_id_list(requested_ids)
    if allowed is None:
        return requested
    return [branch_id for branch_id in requested if branch_id in allowed]


@dataclass
class AudienceContext:
    actor: object
    spec: CampaignFilterSpec
    now: object
    allowed_branch_ids: Optional[List[int]]
    scoped_orders: object

    @property
    def denied(self) -> bool:
        """Non-admin staff without any branch see nothing"""
        return self.allowed_branch_ids is not None and not self.allowed_branch_ids

    def has_order(self, **lookups):
        """EXISTS over the actor's scoped orders for the outer customer"""
        return Exists(self.scoped_orders.filter(customer=OuterRef('pk'), **lookups))


# ============ Pipeline Steps ============

def filter_scoped_customers(queryset, context):
    if context.denied:
        return queryset.none()
    return queryset.filter(context.has_order())


def annotate_order_aggregates(queryset, context):
    scope = Q()
    if context.allowed_branch_ids:
        scope = Q(orders__branch_id__in=context.allowed_branch_ids)

    return queryset.annotate(
        orders_count=Count('orders', filter=scope),
        total_spent=Sum('orders__total_amount', filter=scope),
        average_order_value=Avg('orders__total_amount', filter=scope),
        last_order_at=Max('orders__created_at', filter=scope),
    )


def filter_platform(queryset, context):
    if context.spec.platform == PLATFORM_TELEGRAM:
        return queryset.filter(telegram_id__isnull=False)
    return queryset


def filter_search(queryset, context):
    search = context.spec.search
    if not search:
        return queryset
    return queryset.filter(
        Q(name__icontains=search)
        | Q(phone__icontains=search)
        | Q(telegram_username__icontains=search)
    )


def filter_branches(queryset, context):
    if not context.spec.branch_ids or context.denied:
        return queryset

    branch_ids = effective_branch_ids(context.actor, context.spec.branch_ids)
    if not branch_ids:
        logger.info(
            f"Branch filter {context.spec.branch_ids} is outside the scope of "
            f"user {getattr(context.actor, 'pk', None)}; audience forced empty"
        )
        return queryset.none()

    return queryset.filter(context.has_order(branch_id__in=branch_ids))


def filter_included_items(queryset, context):
    item_ids = context.spec.include_menu_item_ids
    if not item_ids or context.denied:
        return queryset
    return queryset.filter(context.has_order(items__menu_item_id__in=item_ids))


def filter_excluded_items(queryset, context):
    item_ids = context.spec.exclude_menu_item_ids
    if not item_ids or context.denied:
        return queryset
    return queryset.filter(~context.has_order(items__menu_item_id__in=item_ids))


def start_of_day(value):
    return timezone.localtime(value).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value):
    return timezone.localtime(value).replace(hour=23, minute=59, second=59, microsecond=999999)


def filter_recency_max(queryset, context):
    """Ordered on or after the start of the day N days ago"""
    days = context.spec.recency_max_days
    if days is None or context.denied:
        return queryset
    cutoff = start_of_day(context.now - timedelta(days=days))
    return queryset.filter(context.has_order(created_at__gte=cutoff))


def filter_recency_min(queryset, context):
    """No order after the end of the day N days ago"""
    days = context.spec.recency_min_days
    if not days or days <= 0 or context.denied:
        return queryset
    cutoff = end_of_day(context.now - timedelta(days=days))
    return queryset.filter(~context.has_order(created_at__gt=cutoff))


def filter_aggregate_ranges(queryset, context):
    spec = context.spec
    lookups = {
        'orders_count__gte': spec.orders_min,
        'orders_count__lte': spec.orders_max,
        'total_spent__gte': spec.total_spent_min,
        'total_spent__lte': spec.total_spent_max,
        'average_order_value__gte': spec.avg_order_value_min,
        'average_order_value__lte': spec.avg_order_value_max,
    }
    having = {lookup: value for lookup, value in lookups.items() if value is not None}
    if not having:
        return queryset
    return queryset.filter(**having)


AUDIENCE_PIPELINE = (
    filter_scoped_customers,
    annotate_order_aggregates,
    filter_platform,
    filter_search,
    filter_branches,
    filter_included_items,
    filter_excluded_items,
    filter_recency_max,
    filter_recency_min,
    filter_aggregate_ranges,
)


def build_audience(actor, spec: CampaignFilterSpec, now=None):
    """
    Annotated Customer queryset matching the filter for this actor.

    Raises AudienceRangeError before any query is built when a range pair is
    inverted. No ordering or limit is applied; see ordered().
    """
    check_ranges(spec)

    context = AudienceContext(
        actor=actor,
        spec=spec,
        now=now or timezone.now(),
        allowed_branch_ids=get_user_branch_ids(actor),
        scoped_orders=scope_orders(Order.objects.all(), actor),
    )

    queryset = Customer.objects.all()
    for step in AUDIENCE_PIPELINE:
        queryset = step(queryset, context)
    return queryset


def ordered(queryset):
    """Campaign ordering: most orders first, then highest spend"""
    return queryset.order_by('-orders_count', '-total_spent', 'pk')
