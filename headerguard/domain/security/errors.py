"""
Domain-specific errors for the security bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class SecurityDomainError(Exception):
    """Base error for all security domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidPolicyError(SecurityDomainError):
    """Raised when a policy configuration is rejected at load time."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Invalid security policy field '{field}': {reason}")
        self.field = field
        self.reason = reason


class SecureRandomUnavailableError(SecurityDomainError):
    """Raised when the cryptographic random source cannot produce a nonce."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Secure random source unavailable: {reason}")
        self.reason = reason


class MalformedViolationReportError(SecurityDomainError):
    """Raised when a CSP violation report body cannot be parsed."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Malformed violation report: {reason}")
        self.reason = reason
