"""
models.py

Value types shared by the query stages. Records themselves stay plain
mappings; everything here is derived per pipeline run and never written back.
"""

import logging
import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config import ALL_SENTINEL, ALL_TAB, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

ShipmentRecord = Mapping[str, Any]
CustomerDirectory = Mapping[str, Union[str, Mapping[str, Any]]]
CarrierDirectory = Mapping[str, Mapping[str, Any]]


def _snake_case(key: str) -> str:
    key = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", key)
    return key.replace("-", "_").lower()


def _fields_from_dict(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Map camelCase / snake_case keys onto the dataclass fields of ``cls``.
    Unknown keys are dropped.
    """
    known = {f.name for f in fields(cls)}
    out: Dict[str, Any] = {}
    for key, value in (data or {}).items():
        name = _snake_case(str(key))
        if name in known:
            out[name] = value
        else:
            logger.debug("Ignoring unknown %s key '%s'.", cls.__name__, key)
    return out


@dataclass(frozen=True)
class Address:
    company: Optional[str] = None
    contact: Optional[str] = None
    street: Optional[str] = None
    street2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    def values(self) -> List[str]:
        return [getattr(self, f.name) for f in fields(self) if getattr(self, f.name)]

    def text(self) -> str:
        return " ".join(self.values())

    def short_label(self) -> str:
        return ", ".join(v for v in (self.city, self.state) if v)


@dataclass(frozen=True)
class ShipmentDates:
    created: Optional[pd.Timestamp] = None
    booked: Optional[pd.Timestamp] = None
    booking: Optional[pd.Timestamp] = None
    shipped: Optional[pd.Timestamp] = None
    eta1: Optional[pd.Timestamp] = None
    eta2: Optional[pd.Timestamp] = None
    carrier_eta: Optional[pd.Timestamp] = None
    delivered: Optional[pd.Timestamp] = None

    def best(self) -> Optional[pd.Timestamp]:
        """Best-available date of the shipment: shipped, booked, booking, created."""
        for ts in (self.shipped, self.booked, self.booking, self.created):
            if ts is not None:
                return ts
        return None

    def ship_date(self) -> Optional[pd.Timestamp]:
        for ts in (self.booked, self.booking, self.created):
            if ts is not None:
                return ts
        return None

    def eta(self) -> Optional[pd.Timestamp]:
        for ts in (self.eta1, self.eta2, self.carrier_eta):
            if ts is not None:
                return ts
        return None

    def present(self) -> List[pd.Timestamp]:
        return [getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None]


@dataclass(frozen=True)
class NormalizedShipment:
    id: Optional[str] = None
    display_id: Optional[str] = None
    company_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    carrier_name: Optional[str] = None
    carrier_service: Optional[str] = None
    tracking_numbers: Tuple[str, ...] = ()
    reference_numbers: Tuple[str, ...] = ()
    status_code: Optional[str] = None
    raw_status: Optional[str] = None
    shipment_type: Optional[str] = None
    invoice_status: Optional[str] = None
    origin: Address = field(default_factory=Address)
    destination: Address = field(default_factory=Address)
    dates: ShipmentDates = field(default_factory=ShipmentDates)
    weight: Optional[float] = None
    pieces: Optional[float] = None
    total_charge: Optional[float] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    billing_contact: Address = field(default_factory=Address)

    @property
    def primary_reference(self) -> Optional[str]:
        return self.reference_numbers[0] if self.reference_numbers else None

    @property
    def primary_tracking(self) -> Optional[str]:
        return self.tracking_numbers[0] if self.tracking_numbers else None

    def route(self) -> str:
        return f"{self.origin.short_label()} -> {self.destination.short_label()}"


@dataclass(frozen=True)
class DateRange:
    start: pd.Timestamp
    end: pd.Timestamp
    label: Optional[str] = None

    def contains(self, ts: Optional[pd.Timestamp]) -> bool:
        if ts is None:
            return False
        return self.start <= ts <= self.end


@dataclass(frozen=True)
class AdvancedFilterCriteria:
    """
    Sparse set of independent predicates. Empty / None fields are no-ops,
    list fields are OR'd internally and all non-empty fields are AND'd.
    """

    shipment_ids: Tuple[str, ...] = ()
    company_ids: Tuple[str, ...] = ()
    customer_ids: Tuple[str, ...] = ()
    customer_name: Optional[str] = None
    statuses: Tuple[str, ...] = ()
    carriers: Tuple[str, ...] = ()
    carrier_services: Tuple[str, ...] = ()
    shipment_types: Tuple[str, ...] = ()
    invoice_statuses: Tuple[str, ...] = ()
    tracking_numbers: Tuple[str, ...] = ()
    reference_numbers: Tuple[str, ...] = ()
    currency: Optional[str] = None
    notes: Optional[str] = None
    origin_company: Optional[str] = None
    origin_city: Optional[str] = None
    origin_state: Optional[str] = None
    origin_postal_code: Optional[str] = None
    origin_country: Optional[str] = None
    destination_company: Optional[str] = None
    destination_city: Optional[str] = None
    destination_state: Optional[str] = None
    destination_postal_code: Optional[str] = None
    destination_country: Optional[str] = None
    created_from: Any = None
    created_to: Any = None
    shipped_from: Any = None
    shipped_to: Any = None
    eta_from: Any = None
    eta_to: Any = None
    delivered_from: Any = None
    delivered_to: Any = None
    weight_min: Optional[float] = None
    weight_max: Optional[float] = None
    pieces_min: Optional[float] = None
    pieces_max: Optional[float] = None
    charge_min: Optional[float] = None
    charge_max: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AdvancedFilterCriteria":
        values = _fields_from_dict(cls, data or {})
        for f in fields(cls):
            if f.name in values and isinstance(f.default, tuple):
                values[f.name] = _as_tuple(values[f.name])
        return cls(**values)

    def is_empty(self) -> bool:
        return not any(_is_set(getattr(self, f.name)) for f in fields(self))


@dataclass(frozen=True)
class LegacyFieldFilters:
    shipment_id: Optional[str] = None
    reference_number: Optional[str] = None
    tracking_number: Optional[str] = None
    customer_name: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LegacyFieldFilters":
        return cls(**_fields_from_dict(cls, data or {}))

    def is_empty(self) -> bool:
        return not any(_is_set(getattr(self, f.name)) for f in fields(self))


@dataclass(frozen=True)
class SearchQuery:
    text: str = ""
    tab_filter: str = ALL_TAB
    advanced_filter: Optional[AdvancedFilterCriteria] = None
    legacy_fields: Optional[LegacyFieldFilters] = None
    sort_key: Optional[str] = None
    sort_direction: str = "desc"
    page: int = 0
    page_size: int = 50
    carrier: str = ALL_SENTINEL
    status: str = ALL_SENTINEL
    invoice_status: str = ALL_SENTINEL
    shipment_type: str = ALL_SENTINEL
    date_range: Optional[Tuple[Any, Any]] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SearchQuery":
        values = _fields_from_dict(cls, data or {})
        if isinstance(values.get("advanced_filter"), Mapping):
            values["advanced_filter"] = AdvancedFilterCriteria.from_dict(values["advanced_filter"])
        if isinstance(values.get("legacy_fields"), Mapping):
            values["legacy_fields"] = LegacyFieldFilters.from_dict(values["legacy_fields"])
        if values.get("date_range") is not None:
            values["date_range"] = _date_range_pair(values["date_range"])
        return cls(**values)


@dataclass(frozen=True)
class RankedResult:
    record: ShipmentRecord
    score: int = 0


@dataclass(frozen=True)
class Suggestion:
    kind: str
    label: str
    value: str
    score: int = 0
    record: Optional[ShipmentRecord] = None
    matched_field: Optional[str] = None


@dataclass(frozen=True)
class QueryResult:
    page: List[ShipmentRecord]
    all_filtered: List[ShipmentRecord]
    total_count: int


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    return (value,)


def _date_range_pair(value: Any) -> Tuple[Any, Any]:
    """Accept {"start", "end"} or {"from", "to"} mappings as well as 2-item sequences."""
    if isinstance(value, Mapping):
        start = value.get("start", value.get("from"))
        end = value.get("end", value.get("to"))
        return (start, end)
    start, end = value
    return (start, end)


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, frozenset)):
        return any(_is_set(v) for v in value)
    return True
