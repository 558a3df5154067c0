from __future__ import annotations

from datetime import date, timedelta

from django.db.models import F, Q
from django.utils import timezone

from core.models import InventoryItem

EXPIRY_WINDOW_DAYS = 30


def _annotate(item: InventoryItem, today: date) -> InventoryItem:
    item.days_to_expiry = (item.expiry_date - today).days
    item.low_stock = item.quantity <= item.alert_threshold
    item.expiring_soon = item.days_to_expiry <= EXPIRY_WINDOW_DAYS
    return item


def inventory_alerts(today: date | None = None) -> list[InventoryItem]:
    """Items at or below their threshold, or expiring within the window.

    ``today`` is taken at call time, so expired stock is always included.
    """
    today = today or timezone.localdate()
    horizon = today + timedelta(days=EXPIRY_WINDOW_DAYS)
    qs = InventoryItem.objects.filter(
        Q(quantity__lte=F('alert_threshold')) | Q(expiry_date__lte=horizon)
    ).order_by('expiry_date', 'medicine_name')
    return [_annotate(item, today) for item in qs]
