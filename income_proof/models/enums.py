"""Enumeration types for income proof entities."""

from enum import Enum


class PaymentFrequency(str, Enum):
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    IRREGULAR = "irregular"


class QueryKind(str, Enum):
    TOKEN_ID = "tokenId"
    HASH = "hash"
    WALLET = "wallet"


class JurisdictionStatus(str, Enum):
    PERMITTED = "PERMITTED"
    BLOCKED = "BLOCKED"


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"
