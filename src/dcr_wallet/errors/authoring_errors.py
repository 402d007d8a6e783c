"""Transaction authoring errors.

Every failure of an authoring call is raised as one of these; no partial
transaction is ever returned alongside them.
"""

from __future__ import annotations

from dcr_wallet.errors.wallet_errors import WalletError


class AuthoringError(WalletError):
    """Base error for transaction authoring failures."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "authoring-error",
    ) -> None:
        super().__init__(message, code=code)


class InvalidAmountError(AuthoringError):
    """A destination amount is zero, negative or above the network maximum."""

    def __init__(self, message: str = "invalid amount") -> None:
        super().__init__(message, code="invalid-amount")


class InvalidAddressError(AuthoringError):
    """An address cannot be decoded for the active network."""

    def __init__(self, message: str = "invalid address") -> None:
        super().__init__(message, code="invalid-address")


class UnsupportedAddressTypeError(AuthoringError):
    """An address decodes but has no known locking script template."""

    def __init__(self, message: str = "unsupported address type") -> None:
        super().__init__(message, code="unsupported-address-type")


class MultipleMaxAmountRecipientsError(AuthoringError):
    """More than one destination is set to receive the maximum amount."""

    def __init__(self, message: str = "cannot send max amount to multiple recipients") -> None:
        super().__init__(message, code="multiple-max-amount-recipients")


class ConflictingChangeSpecificationError(AuthoringError):
    """A send-max destination was combined with explicit change destinations."""

    def __init__(
        self,
        message: str = (
            "no change is generated when sending max amount, "
            "change destinations must not be provided"
        ),
    ) -> None:
        super().__init__(message, code="conflicting-change")


class ChangeAddressGenerationFailedError(AuthoringError):
    """The change address provider failed to produce an address."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="change-address-failed")


class InsufficientFundsError(AuthoringError):
    """Send amount plus fee exceeds the total input amount.

    Attributes:
        shortfall: Atoms missing to cover the send amount and fee.
    """

    def __init__(self, message: str, *, shortfall: int) -> None:
        super().__init__(message, code="insufficient-funds")
        self.shortfall = shortfall


class ScriptTooLargeError(AuthoringError):
    """A change script exceeds the maximum element size pushable to the stack."""

    def __init__(
        self,
        message: str = "script size exceed maximum bytes pushable to the stack",
    ) -> None:
        super().__init__(message, code="script-too-large")


class ChangeAllocationExceedsAvailableError(AuthoringError):
    """Explicit change amounts add up to more than the actual change."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="change-allocation-exceeds-available")


class DestinationIndexError(AuthoringError):
    """A destination index does not exist on the transaction builder."""

    def __init__(self, message: str = "destination index out of range") -> None:
        super().__init__(message, code="destination-not-found")
