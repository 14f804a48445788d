"""Cabin category to location id lookup."""
from types import MappingProxyType
from typing import Any, Optional

from processor.models import UNSET

# Meeting events have a category but no dedicated cabin
LOCATION_IDS = MappingProxyType({
    'Foster': '45617389-7678-42bf-bfb4-83304a389dc7',
    'House': '430a512f-6a35-4ed0-9e4b-4efa7a90a0e7',
    'Ide': 'd0b162c0-8a64-4946-b148-a7362c296709',
    'Kendrew': '2bb998a2-7c9a-4367-bcdb-b8e8a144b8a7',
    'Meeting': None,
    'Mosher': '649d65b6-9a50-491f-b0f2-8a0e22ee6275',
})

CATEGORY_LABELS = tuple(LOCATION_IDS)


def resolve_category(label: Optional[str] = None) -> Any:
    """
    Resolve a category label to its location id.

    Args:
        label: Validated category label, or None when the event has none

    Returns:
        UNSET for no label, None for Meeting, otherwise the location id
    """
    if label is None:
        return UNSET
    return LOCATION_IDS[label]
