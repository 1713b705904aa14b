"""Domain errors raised by the issuance engine.

Every error carries the HTTP status the API answers with, so routes can let
them propagate and a single exception handler in `main.py` renders them.
"""


class EngineError(Exception):
    status_code = 400

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.__doc__ or self.__class__.__name__
        super().__init__(self.detail)


class InvalidAmount(EngineError):
    """Amount must be greater than zero."""


class InsufficientBalance(EngineError):
    """Insufficient token balance."""


class PayoutFailed(EngineError):
    """Reserve payout to the seller did not complete."""

    status_code = 409


class InvalidPercentage(EngineError):
    """Founder percentage must be between 0 and 100."""


class Unauthorized(EngineError):
    """Only the token owner may perform this action."""

    status_code = 403


class ReserveUnderflow(EngineError):
    """Reserve balance cannot go below zero."""

    status_code = 409


class PricingFailed(EngineError):
    """The pricing curve cannot price this request in the current state."""

    status_code = 409


class AccountNotFound(EngineError):
    """Account not found."""

    status_code = 404


class TokenNotDeployed(EngineError):
    """Token has not been deployed."""

    status_code = 503
