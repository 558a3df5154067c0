from __future__ import annotations

from itertools import combinations
from typing import Iterable

from django.db.models import Q

from core.models import DrugInteraction


def normalize_drugs(names: Iterable[str]) -> list[str]:
    """Trim, drop empties and de-duplicate case-insensitively, keeping order."""
    seen: set[str] = set()
    drugs: list[str] = []
    for name in names:
        name = (name or '').strip()
        key = name.casefold()
        if name and key not in seen:
            seen.add(key)
            drugs.append(name)
    return drugs


def find_interactions(names: Iterable[str]) -> list[DrugInteraction]:
    """Stored interactions between any two of ``names``.

    A pair matches a record stored in either order.  Each record is
    returned once, in the order its pair was first checked.
    """
    found: dict[int, DrugInteraction] = {}
    for a, b in combinations(normalize_drugs(names), 2):
        pair = (Q(drug1__iexact=a) & Q(drug2__iexact=b)) | (Q(drug1__iexact=b) & Q(drug2__iexact=a))
        for interaction in DrugInteraction.objects.filter(pair).order_by('id'):
            found.setdefault(interaction.id, interaction)
    return list(found.values())
