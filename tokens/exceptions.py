"""
Error types raised by the token lifecycle services.

Ledger failures are split into permanent rejections and transient
connectivity problems so callers (and the CLI exit code) can tell them apart.
"""
from typing import Optional, Sequence


class TokenLifecycleError(Exception):
    """Base class for every error raised by the tokens app."""


class ConfigurationError(TokenLifecycleError):
    """Missing or malformed endpoint, authority key or mint address."""


class LedgerError(TokenLifecycleError):
    transient = False

    def __init__(self, message: str, label: Optional[str] = None):
        super().__init__(message)
        self.label = label


class RejectedOperation(LedgerError):
    """The ledger declined the bundle (bad state, balance, authority...)."""


class NetworkUnavailable(LedgerError):
    """The RPC endpoint could not be reached."""

    transient = True


class ConfirmationTimeout(NetworkUnavailable):
    """
    The transaction was sent but no confirmation arrived before its
    blockhash expired. It may or may not have landed.
    """

    def __init__(self, message: str, label: Optional[str] = None, signature: Optional[str] = None):
        super().__init__(message, label)
        self.signature = signature


class LifecycleStepFailed(TokenLifecycleError):
    """
    A lifecycle step failed after zero or more earlier steps were confirmed.

    Confirmed steps are not rolled back; ``completed`` lists their receipts
    so the partial progress can be reported.
    """

    def __init__(self, step: str, cause: Exception, completed: Sequence = ()):
        super().__init__(f"Step '{step}' failed: {cause}")
        self.step = step
        self.cause = cause
        self.completed = tuple(completed)

    @property
    def transient(self) -> bool:
        return bool(getattr(self.cause, 'transient', False))
