"""
Verification failure taxonomy.

Every failure path raises a VerificationError subclass (or lets a
GatewayTransportError through) carrying a human-readable message suitable
for direct display.
"""


class VerificationError(Exception):
    """Base exception for verification workflow failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(VerificationError):
    """Required input missing; raised before any I/O."""

    pass


class UnrecognizedDateFormatError(VerificationError):
    """Claimed tenure text has no parseable start year; raised before any I/O."""

    def __init__(self, years_text: str) -> None:
        super().__init__("Unrecognized date format in work history")
        self.years_text = years_text


class NoMatchError(VerificationError):
    """Company lookup succeeded but returned no legal entities."""

    pass


class ServiceSoftFailureError(VerificationError):
    """The gateway declared a failure and supplied a message."""

    pass


class TokenExpiredError(ServiceSoftFailureError):
    """
    Company session credentials are stale.

    Consumed by the employee verifier's bounded retry; once retries are
    exhausted it surfaces as an ordinary ServiceSoftFailureError.
    """

    pass


class RecordPersistenceError(VerificationError):
    """A RecordStore write failed."""

    pass
