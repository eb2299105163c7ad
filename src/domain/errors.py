# mealdeal/src/domain/errors.py
from __future__ import annotations


class PricingError(Exception):
    """Base class for errors raised to callers of the pricing entry points."""


class UnknownPostalCodeError(PricingError, ValueError):
    def __init__(self, postal_code: str) -> None:
        super().__init__(f"Unknown postal code: {postal_code}")
        self.postal_code = postal_code


class NotFoundError(PricingError, LookupError):
    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class StorageUnavailableError(PricingError):
    """Reference data could not be read; callers may retry the whole request."""
