"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from marketplace.domain.model.coupon import CouponRejection


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated (invalid input)."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidCouponError(DomainException):
    """A requested coupon cannot be applied; checkout is aborted."""

    def __init__(self, code: str, reason: CouponRejection) -> None:
        super().__init__(f"Coupon '{code}' could not be applied: {reason.message}")
        self.code = code
        self.reason = reason


class PaymentGatewayError(DomainException):
    """The payment gateway failed or timed out. Safe to retry."""


class PersistenceError(DomainException):
    """A unit of work could not be committed."""


class ConcurrencyConflict(PersistenceError):
    """Another transaction changed the same data first."""


class ConfigurationError(DomainException):
    """A setting is missing or malformed."""
