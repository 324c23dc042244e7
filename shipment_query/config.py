from typing import Dict, List, Tuple

# -------------------------------------------------------------------------
# Environment Variables & Constraints
# -------------------------------------------------------------------------
# Record source: either a local file or an Azure Blob container.
LOCAL_SOURCE_ENV_VAR = "SHIPMENT_RECORDS_PATH"

AZURE_ENV_VARS = [
    "AZURE_STORAGE_CONN_STR",
    "AZURE_STORAGE_CONTAINER_WNLD",
]

# Optional Environment Variables
OPTIONAL_ENV_VARS = [
    "AZURE_BLOB_NAME",
    "AZURE_STORAGE_CONTAINER_UPLD",
    "CUSTOMER_DIRECTORY_PATH",
    "CARRIER_DIRECTORY_PATH",
]

# Record files the ingestor knows how to read
RECORD_FILE_SUFFIXES: Tuple[str, ...] = (".jsonl", ".json", ".csv")

LOGGER_NAME = "shipment_query"

# -------------------------------------------------------------------------
# Field alias priority lists (canonical field -> ordered source paths)
# -------------------------------------------------------------------------
# The first present, non-empty path wins. List-valued canonical fields
# (tracking / reference numbers) collect every present path in this order.
Path = Tuple[str, ...]

FIELD_ALIASES: Dict[str, List[Path]] = {
    "id": [("id",), ("documentId",), ("shipmentID",)],
    "display_id": [("shipmentID",), ("shipmentId",), ("shipmentNumber",), ("id",)],
    "company_id": [("companyID",), ("companyId",), ("company", "id")],
    "customer_id": [
        ("shipTo", "customerID"),
        ("shipTo", "customerId"),
        ("customerID",),
        ("customerId",),
        ("shipFrom", "customerID"),
    ],
    "customer_name": [
        ("customerName",),
        ("shipTo", "customerName"),
        ("shipTo", "companyName"),
        ("shipTo", "company"),
    ],
    "carrier_name": [
        ("carrier",),
        ("selectedCarrier",),
        ("selectedRate", "carrier"),
        ("selectedRateRef", "carrier"),
        ("selectedRate", "carrierName"),
        ("carrierName",),
        ("shipmentInfo", "carrier"),
    ],
    "carrier_service": [
        ("selectedRate", "service"),
        ("selectedRateRef", "service"),
        ("selectedRate", "serviceName"),
        ("service",),
        ("shipmentInfo", "serviceLevel"),
    ],
    "tracking_numbers": [
        ("trackingNumber",),
        ("selectedRate", "trackingNumber"),
        ("selectedRate", "TrackingNumber"),
        ("selectedRateRef", "trackingNumber"),
        ("selectedRateRef", "TrackingNumber"),
        ("carrierTrackingData", "trackingNumber"),
        ("carrierBookingConfirmation", "trackingNumber"),
        ("carrierBookingConfirmation", "proNumber"),
        ("shipmentInfo", "carrierTrackingNumber"),
        ("bookingReferenceNumber",),
    ],
    "reference_numbers": [
        ("shipmentInfo", "shipperReferenceNumber"),
        ("referenceNumber",),
        ("shipperReferenceNumber",),
        ("selectedRate", "referenceNumber"),
        ("selectedRateRef", "referenceNumber"),
        ("shipmentInfo", "referenceNumbers"),
        ("referenceNumbers",),
    ],
    "status": [("status",), ("shipmentStatus",), ("statusOverride", "status")],
    "shipment_type": [("shipmentInfo", "shipmentType"), ("shipmentType",)],
    "invoice_status": [("invoiceStatus",), ("billingStatus",), ("invoice", "status")],
    "origin": [("shipFrom",), ("shipfrom",), ("origin",)],
    "destination": [("shipTo",), ("shipto",), ("destination",)],
    "notes": [
        ("shipmentInfo", "notes"),
        ("notes",),
        ("shipmentInfo", "specialInstructions"),
        ("specialInstructions",),
    ],
    "billing_contact": [
        ("shipmentInfo", "billingContact"),
        ("billingContact",),
        ("billTo",),
    ],
    "weight": [("totalWeight",), ("shipmentInfo", "totalWeight"), ("weight",)],
    "pieces": [("totalPieces",), ("shipmentInfo", "totalPieces"), ("pieces",)],
    "total_charge": [
        ("markupRates", "totalCharges"),
        ("totalCharges",),
        ("selectedRate", "totalCharges"),
        ("selectedRate", "pricing", "total"),
        ("selectedRateRef", "totalCharges"),
    ],
    "currency": [
        ("selectedRate", "currency"),
        ("selectedRate", "pricing", "currency"),
        ("currency",),
        ("selectedRateRef", "currency"),
    ],
}

# Same idea for the individual date slots.
DATE_ALIASES: Dict[str, List[Path]] = {
    "created": [("createdAt",), ("date",), ("creationDate",)],
    "booked": [("bookedAt",), ("shipmentInfo", "bookedAt")],
    "booking": [
        ("bookingTimestamp",),
        ("carrierBookingConfirmation", "bookingTimestamp"),
        ("carrierBookingConfirmation", "confirmedAt"),
    ],
    "shipped": [
        ("shipmentInfo", "shipmentDate"),
        ("shipmentDate",),
        ("scheduledDate",),
    ],
    "eta1": [("shipmentInfo", "eta1"), ("ETA1",), ("eta1",)],
    "eta2": [("shipmentInfo", "eta2"), ("ETA2",), ("eta2",)],
    "carrier_eta": [
        ("carrierBookingConfirmation", "estimatedDeliveryDate"),
        ("carrierTrackingData", "estimatedDelivery"),
        ("estimatedDeliveryDate",),
        ("selectedRate", "transit", "estimatedDelivery"),
    ],
    "delivered": [
        ("deliveredAt",),
        ("actualDeliveryDate",),
        ("shipmentInfo", "deliveredAt"),
        ("carrierBookingConfirmation", "deliveredAt"),
    ],
}

# Address sub-fields inside shipFrom / shipTo
ADDRESS_ALIASES: Dict[str, List[str]] = {
    "company": ["companyName", "company", "name"],
    "contact": ["attention", "contactName", "contact", "firstName"],
    "street": ["street", "address1", "streetAddress"],
    "street2": ["street2", "address2"],
    "city": ["city"],
    "state": ["state", "province", "stateProv"],
    "postal_code": ["postalCode", "zipPostal", "zip", "postal"],
    "country": ["country"],
    "email": ["email", "contactEmail"],
    "phone": ["phone", "contactPhone"],
}

# Epoch numbers above this are milliseconds, below are seconds
EPOCH_MILLIS_CUTOFF = 1e11

# -------------------------------------------------------------------------
# Status aliases
# -------------------------------------------------------------------------
STATUS_GROUPS: Dict[str, List[str]] = {
    "pending": [
        "pending", "booked", "scheduled", "ready", "awaiting shipment",
        "ready to process", "ready for shipping", "booking requested",
        "booking confirmed", "waiting", "processing", "preparing",
    ],
    "in_transit": [
        "in transit", "transit", "on the way", "shipping", "en route",
        "on route", "picked up", "traveling", "at terminal", "in customs",
        "on board",
    ],
    "delivered": ["delivered", "completed", "received", "arrived", "closed"],
    "delayed": [
        "delayed", "delay", "late", "overdue", "exception", "on hold",
        "possible delay", "weather delay", "attempted delivery",
    ],
    "cancelled": ["cancelled", "canceled", "void", "voided"],
    "out_for_delivery": ["out for delivery", "delivering"],
    "ready_for_pickup": ["ready for pickup", "held for pick up", "awaiting pickup"],
}

# Tab bar groups: which canonical groups each tab shows
DRAFT_STATUSES = ["draft"]

TAB_GROUPS: Dict[str, List[str]] = {
    "awaiting_shipment": ["pending", "ready_for_pickup"],
    "in_transit": ["in_transit", "out_for_delivery"],
    "delivered": ["delivered"],
    "delayed": ["delayed"],
    "cancelled": ["cancelled"],
}

ALL_TAB = "all"
DRAFT_TAB = "draft"

# Sentinel meaning "this sub-filter is off"
ALL_SENTINEL = "all"

# -------------------------------------------------------------------------
# Unified search
# -------------------------------------------------------------------------
SHORT_QUERY_MAX_LEN = 3
MEDIUM_QUERY_MAX_LEN = 6
MEDIUM_MIN_CONTAINS_FIELD_LEN = 6

FUZZY_MIN_NEEDLE_LEN = 4
MEDIUM_FUZZY_THRESHOLD = 0.8
LONG_FUZZY_THRESHOLD = 0.7

SCORE_STATUS = 1000
SCORE_DATE = 500

# rule -> field class -> score ("default" covers unlisted classes)
SCORE_RUBRIC: Dict[str, Dict[str, int]] = {
    "exact": {
        "id": 1000, "company_id": 900, "customer_id": 900,
        "tracking": 950, "reference": 950,
        "city": 700, "company": 700, "state": 600,
        "notes": 100, "default": 500,
    },
    "prefix": {
        "id": 800, "company_id": 750, "customer_id": 750,
        "tracking": 750, "reference": 750, "default": 600,
    },
    "word": {
        "id": 480, "city": 450, "company": 450, "street": 350,
        "reference": 400, "tracking": 400, "carrier": 300,
        "notes": 60, "default": 300,
    },
    "contains": {
        "id": 500, "company_id": 450, "customer_id": 450,
        "city": 300, "company": 280, "reference": 250, "tracking": 250,
        "street": 200, "carrier": 150, "state": 150, "contact": 150,
        "postal": 150, "country": 100, "notes": 50, "default": 100,
    },
    "fuzzy": {"notes": 30, "default": 100},
}

SHORT_TIER_FIELDS = ["id", "company_id"]
MEDIUM_TIER_FIELDS = [
    "id", "company_id", "customer_id", "reference", "tracking",
    "city", "state", "company",
]
LONG_TIER_FIELDS = [
    "id", "company_id", "customer_id", "reference", "tracking",
    "city", "state", "company", "contact", "street", "postal", "country",
    "carrier", "notes",
]
# Field classes that take the hyphen / underscore prefix rule
ID_LIKE_FIELDS = {"id", "company_id", "customer_id", "reference", "tracking"}

# -------------------------------------------------------------------------
# Sorting & pagination
# -------------------------------------------------------------------------
SORTABLE_KEYS = [
    "shipmentID", "customer", "shipDate", "eta", "carrier",
    "status", "reference", "route", "charges",
]
SHOW_ALL_PAGE_SIZE = -1
DEFAULT_PAGE_SIZE = 50

# -------------------------------------------------------------------------
# Live suggestions
# -------------------------------------------------------------------------
SUGGESTION_MIN_QUERY_LEN = 2
SUGGESTION_LIMIT = 6
QUICK_ACTION_LIMIT = 5

SUGGESTION_FIELD_WEIGHTS: Dict[str, int] = {
    "id": 100, "reference": 90, "tracking": 90, "customer_id": 80,
    "company": 70, "customer": 70, "city": 60, "state": 40,
    "contact": 50, "street": 40, "postal": 40, "country": 20,
    "carrier": 50, "service": 40, "billing": 30, "date": 30, "status": 60,
    "notes": 10,
}
SUGGESTION_MATCH_BONUS: Dict[str, int] = {"exact": 300, "prefix": 150, "contains": 0}

# (kind, label, value)
QUICK_ACTIONS: List[Tuple[str, str, str]] = [
    ("status", "Delivered", "delivered"),
    ("status", "In Transit", "in_transit"),
    ("status", "Pending", "pending"),
    ("status", "Delayed", "delayed"),
    ("status", "Cancelled", "cancelled"),
    ("status", "Out for Delivery", "out_for_delivery"),
    ("status", "Ready for Pickup", "ready_for_pickup"),
    ("date", "Today", "today"),
    ("date", "Yesterday", "yesterday"),
    ("date", "Last Week", "last week"),
    ("date", "Last Month", "last month"),
]

# -------------------------------------------------------------------------
# Semantic (natural-language) search
# -------------------------------------------------------------------------
SEMANTIC_STATUS_TERMS: Dict[str, List[str]] = {
    "delivered": ["delivered", "completed", "received"],
    "in_transit": ["in transit", "transit", "on the way", "shipping", "en route"],
    "pending": ["pending", "booked", "scheduled", "ready"],
    "delayed": ["delayed", "late", "overdue"],
    "cancelled": ["cancelled", "canceled", "void"],
    "out_for_delivery": ["out for delivery", "delivering"],
    "picked_up": ["picked up", "collected"],
}

SEMANTIC_CARRIER_TERMS: Dict[str, List[str]] = {
    "fedex": ["fedex", "fed ex"],
    "ups": ["ups", "united parcel"],
    "dhl": ["dhl"],
    "canpar": ["canpar"],
    "purolator": ["purolator"],
    "eshipplus": ["eshipplus", "eship plus"],
}

SEMANTIC_TIME_TERMS: Dict[str, List[str]] = {
    "today": ["today"],
    "yesterday": ["yesterday"],
    "this week": ["this week", "current week"],
    "last week": ["last week", "previous week", "past week"],
    "this month": ["this month", "current month"],
    "last month": ["last month", "previous month", "past month"],
}

SEMANTIC_SUGGESTION_LIMIT = 3
