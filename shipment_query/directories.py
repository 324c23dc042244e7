from typing import Any, Mapping, Optional

from .models import CarrierDirectory, CustomerDirectory, NormalizedShipment

_NAME_KEYS = ("name", "companyName", "displayName", "carrierName")


def _entry_name(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry.strip() or None
    if isinstance(entry, Mapping):
        for key in _NAME_KEYS:
            val = entry.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return None


def customer_name(customers: Optional[CustomerDirectory], n: NormalizedShipment) -> Optional[str]:
    """Directory name for the shipment's customer (business ID or document ID key)."""
    if not customers or not n.customer_id:
        return None
    return _entry_name(customers.get(n.customer_id))


def display_customer(customers: Optional[CustomerDirectory], n: NormalizedShipment) -> str:
    """Directory name, then record-side names, finally the raw customer id."""
    return (
        customer_name(customers, n)
        or n.customer_name
        or n.destination.company
        or n.customer_id
        or ""
    )


def carrier_summary(carriers: Optional[CarrierDirectory], n: NormalizedShipment) -> Optional[Mapping[str, Any]]:
    if not carriers:
        return None
    for key in (n.id, n.display_id):
        if key and isinstance(carriers.get(key), Mapping):
            return carriers[key]
    return None


def display_carrier(carriers: Optional[CarrierDirectory], n: NormalizedShipment) -> str:
    return _entry_name(carrier_summary(carriers, n)) or n.carrier_name or ""
