"""Ledger error taxonomy.

Services raise these; the HTTP layer only turns the get-by-id lookups into
404s. Everything else is reported by the application exception handlers as a
generic 500 after being logged with its class name.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base class for billing/collections ledger errors"""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(LedgerError):
    """A referenced record does not exist"""

    code = "RESOURCE_NOT_FOUND"
    entity = "Resource"

    def __init__(self, record_id: Optional[Any] = None):
        super().__init__(f"{self.entity} not found", record_id=str(record_id))
        self.record_id = record_id


class SchoolNotFoundError(NotFoundError):
    entity = "School"


class InvoiceNotFoundError(NotFoundError):
    entity = "Invoice"


class CollectionNotFoundError(NotFoundError):
    entity = "Collection"


class ValidationFailure(LedgerError):
    """Stored data does not match the format the ledger relies on"""

    code = "VALIDATION_FAILURE"


class InvoiceNumberFormatError(ValidationFailure):
    """The latest invoice number has no parsable numeric suffix"""

    code = "INVALID_INVOICE_NUMBER"

    def __init__(self, invoice_number: Optional[str]):
        super().__init__(
            f"Invoice number {invoice_number!r} does not match the expected format",
            invoice_number=invoice_number,
        )
        self.invoice_number = invoice_number
