# storefront/domain/errors.py
"""
Bledy domenowe serwisow koszyka, checkoutu i magazynu.

Routery mapuja je na odpowiedzi HTTP przez ``status_code``; wszystko co nie
jest DomainError (ani PermissionError) to bug i konczy sie 500.
"""


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Bledne albo brakujace dane wejsciowe. Rzucane przed jakimkolwiek zapisem."""

    status_code = 400


class AvailabilityError(DomainError):
    """Wariant nieaktywny/niedostepny albo za malo towaru."""

    status_code = 409


class NotFoundError(DomainError):
    status_code = 404


class InventoryError(DomainError):
    """Odmowa zmiany w magazynie, licznik zszedlby ponizej zera."""

    status_code = 409


class AuthenticationRequiredError(DomainError):
    status_code = 401

    def __init__(self, message: str = "Sign in to continue"):
        super().__init__(message)


class TransientIOError(DomainError):
    """Baza albo zdalny serwis niedostepne po ponowieniach."""

    status_code = 503


class CheckoutStageError(DomainError):
    """
    Nieudany zapis w sekwencji checkoutu.

    Uzytkownik widzi tylko ogolny komunikat; ``stage``, ``order_id`` i
    ``idempotency_key`` zostaja dla supportu i reconciliation.
    """

    status_code = 500
    user_message = "Failed to place order. Please try again."

    def __init__(
        self,
        stage: str,
        order_id: int | None = None,
        idempotency_key: str | None = None,
        message: str | None = None,
    ):
        self.stage = stage
        self.order_id = order_id
        self.idempotency_key = idempotency_key
        super().__init__(message or self.user_message)


class CheckoutInProgressError(CheckoutStageError):
    status_code = 409
    user_message = "A checkout for this cart is already in progress."
