"""Models Package - Export all models for easy imports"""

from app.models.base import BaseModel, SchoolScopedMixin, StatusMixin
from app.models.enums import (
    SchoolType,
    ProductTier,
    InvoiceStatus,
    CollectionStatus,
    NON_COUNTING_COLLECTION_STATUSES,
    collection_counts_toward_paid,
)
from app.models.school import School
from app.models.billing import Invoice, Collection, InvoiceSequence


__all__ = [
    # Base classes
    "BaseModel",
    "SchoolScopedMixin",
    "StatusMixin",

    # Enums
    "SchoolType",
    "ProductTier",
    "InvoiceStatus",
    "CollectionStatus",
    "NON_COUNTING_COLLECTION_STATUSES",
    "collection_counts_toward_paid",

    # Schools
    "School",

    # Billing
    "Invoice",
    "Collection",
    "InvoiceSequence",
]
