"""Custom exceptions for the storefront core."""
from __future__ import annotations


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(StorefrontException):
    """Local input validation errors. Never reach the order service."""

    pass


class EmptyCartException(ValidationException):
    """Checkout attempted on an empty cart."""

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class TransportException(StorefrontException):
    """Network failure or non-success response from a storefront endpoint."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class PersistenceException(StorefrontException):
    """Durable storage read/write failure or corrupt payload."""

    pass


class ProductNotFoundException(StorefrontException):
    """Product not found in the catalog."""

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product with ID {product_id} not found")
        self.product_id = product_id


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class CorruptPayloadException(PersistenceException):
    """Stored payload is readable but cannot be decoded."""

    pass
