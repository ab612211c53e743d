"""
Domain errors for the quote → pay → status flow.

Every error carries a stable ``code`` and a short user-facing message. The
HTTP layer renders ``{"error": message, "code": code}``; the client rebuilds
the typed error from ``code`` with :func:`error_from_code`.
"""


class OpenFXError(Exception):
    """Base class for all OpenFX domain errors."""

    code = "OPENFX_ERROR"
    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAmount(OpenFXError):
    code = "INVALID_AMOUNT"
    status_code = 400
    default_message = "Amount must be a positive number."


class UnsupportedCurrencyPair(OpenFXError):
    code = "UNSUPPORTED_CURRENCY_PAIR"
    status_code = 400
    default_message = "Unsupported currency pair"


class QuoteExpired(OpenFXError):
    """Quote is unknown, or its validity window has passed."""

    code = "QUOTE_EXPIRED"
    status_code = 400
    default_message = "Quote has expired or is invalid. Request a new quote."


class PaymentProcessingFailed(OpenFXError):
    """Transient failure of the (simulated) payment rail; safe to retry."""

    code = "PAYMENT_PROCESSING_FAILED"
    status_code = 502
    default_message = "Payment processing failed. Please try again."


class TransactionNotFound(OpenFXError):
    code = "TRANSACTION_NOT_FOUND"
    status_code = 404
    default_message = "Transaction not found"


class PollingExhausted(OpenFXError):
    """Raised by the poller after too many consecutive fetch failures."""

    code = "POLLING_EXHAUSTED"
    default_message = "Unable to load transaction status. Please refresh to try again."

    def __init__(self, transaction_id: str, attempts: int, message: str | None = None):
        self.transaction_id = transaction_id
        self.attempts = attempts
        super().__init__(message)


class PaymentAlreadySubmitted(OpenFXError):
    code = "PAYMENT_ALREADY_SUBMITTED"
    status_code = 409
    default_message = "Payment for this quote is already being processed."


class InvalidTransition(OpenFXError):
    code = "INVALID_TRANSITION"
    default_message = "Invalid state transition"


_ERRORS_BY_CODE: dict[str, type[OpenFXError]] = {
    cls.code: cls
    for cls in (
        InvalidAmount,
        UnsupportedCurrencyPair,
        QuoteExpired,
        PaymentProcessingFailed,
        TransactionNotFound,
        PaymentAlreadySubmitted,
    )
}


def error_from_code(code: str | None, message: str | None = None) -> OpenFXError:
    """Rebuild a typed error from a response body ``code``."""
    cls = _ERRORS_BY_CODE.get(code or "", OpenFXError)
    return cls(message)
