# backend/services/errors.py
from typing import Optional


class InventoryError(Exception):
    """Base class, ``message`` is safe to show to the user as-is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    # Bad input, rejected before any store call
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DuplicateError(InventoryError):
    pass


class NotFoundError(InventoryError):
    pass


class PartialFailureError(InventoryError):
    """The product row was written but its ledger step was not.

    Carries the product id so the caller can retry the ledger step or flag
    the record for reconciliation.
    """

    def __init__(self, message: str, product_id: str):
        super().__init__(message)
        self.product_id = product_id


class TransportError(InventoryError):
    pass
