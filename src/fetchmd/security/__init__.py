"""Security validation for fetchmd."""

from .url_validator import (
    Resolver,
    SecurityError,
    UrlValidator,
    ValidatedUrl,
    is_private_address,
    system_resolver,
    validate_url,
)

__all__ = [
    "Resolver",
    "SecurityError",
    "UrlValidator",
    "ValidatedUrl",
    "is_private_address",
    "system_resolver",
    "validate_url",
]
