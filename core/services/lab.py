from __future__ import annotations

from collections import Counter

from django.db.models import F

from core.models import LabTest, TestStatistic
from core.serializers.clinical import split_test_names
from core.store import get_store


def bump_test_statistics(test_names: str) -> Counter:
    """Add each requested test name to its running counter.

    Names are trimmed and empty entries dropped; a name requested twice
    in one order counts twice.  Must run inside the order's write.
    """
    counts = Counter(split_test_names(test_names))
    for name, n in counts.items():
        if not TestStatistic.objects.filter(test_name=name).update(count=F('count') + n):
            TestStatistic.objects.create(test_name=name, count=n)
    return counts


def order_lab_test(serializer, doctor_id: int) -> LabTest:
    with get_store().write():
        test = serializer.save(doctor_id=doctor_id)
        bump_test_statistics(test.test_names)
    return test


def top_statistics(limit: int = 50):
    return TestStatistic.objects.order_by('-count', 'test_name')[:limit]
