"""Domain-specific exception hierarchy.

All exceptions inherit from ``DomainError`` so callers can catch the entire
family in one clause while still discriminating on subclass.

Provider failures are *not* exceptions: they travel as ``GatewayError``
values inside a ``CallResult``.  The classes below are reserved for
programmer and caller errors.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain-layer errors."""

    def __init__(self, message: str, *, code: str = "DOMAIN_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# ── Validation ───────────────────────────────────────────────
class ValidationError(DomainError):
    """Input failed domain validation rules."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="VALIDATION_ERROR")


# ── Configuration ────────────────────────────────────────────
class ConfigurationError(DomainError):
    """The gateway was wired with an impossible provider setup."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")


class ProviderNotFoundError(ConfigurationError):
    def __init__(self, provider_id: str) -> None:
        super().__init__(f"Provider {provider_id!r} is not registered")
        self.code = "PROVIDER_NOT_FOUND"
        self.provider_id = provider_id
