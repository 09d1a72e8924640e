"""Centralized Enum Definitions"""

import enum


# Schools
class SchoolType(str, enum.Enum):
    """School education levels"""
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    MIXED = "mixed"


class ProductTier(str, enum.Enum):
    """Product line a school signed up for"""
    ANALYTICS = "Analytics"
    FINANCE = "Finance"
    TIMETABLE = "Timetable"


# Ledger
class InvoiceStatus(str, enum.Enum):
    """Invoice settlement status"""
    PENDING = "Pending"
    COMPLETED = "Completed"


class CollectionStatus(str, enum.Enum):
    """
    Known collection statuses.

    The stored column is a plain string: other statuses are accepted and
    persisted as-is, these are the ones the ledger reacts to.
    """
    PENDING = "Pending"
    COMPLETED = "Completed"
    BOUNCED = "Bounced"


# Statuses whose amount no longer counts toward an invoice's paid amount
# (only consulted in the "derived" reconciliation mode).
NON_COUNTING_COLLECTION_STATUSES = frozenset({CollectionStatus.BOUNCED.value})


def collection_counts_toward_paid(status: str) -> bool:
    """Whether a collection with this status still counts as money received"""
    return status not in NON_COUNTING_COLLECTION_STATUSES
