"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and web layers can catch them uniformly and display
user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class MissingAddressError(ValidationError):
    """Checkout was submitted without a shipping or billing address."""


class MissingPaymentMethodError(ValidationError):
    """Checkout was submitted without a usable payment method."""


class PaymentMethodUnavailableError(ValidationError):
    """The chosen payment method is disabled in the payment settings."""


class InsufficientStockError(DomainException):
    """Stock would go negative.

    Raised at commit time when a line that passed cart validation was
    depleted by a concurrent order in the meantime.
    """

    def __init__(self, product_name: str, requested: int, available: int) -> None:
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(need {requested}, have {available})"
        )


class InsufficientBalanceError(DomainException):
    """The wallet cannot cover the order total."""


class WalletUnavailableError(DomainException):
    """The wallet balance could not be retrieved."""


class OrderNumberCollisionError(DomainException):
    """No unique order number could be generated within the retry budget."""


class OrderStateError(DomainException):
    """An order is not in a state that allows the requested transition."""


class PaymentGatewayError(DomainException):
    """The external payment gateway failed or answered with an error.

    No local state may be assumed changed when this is raised.
    """
