"""
Exceptions for the keyvault artifact protocol
Everything derives from KeyvaultError so a caller has a single error catcher
"""


class KeyvaultError(Exception):
    # general container for errors
    pass


class MalformedNameError(KeyvaultError):
    # raised when an object name does not decode into artifact metadata
    pass


class TamperOrKeyError(KeyvaultError):
    # raised when the AEAD tag does not verify: wrong secret OR modified ciphertext.
    # the two causes are never told apart
    pass


class InvalidLocatorError(KeyvaultError):
    # raised when a share link lacks the object id or the key fragment
    pass


class StoreError(KeyvaultError):
    # raised by blob store back-ends on any non-success outcome
    pass


class PolicyViolation(KeyvaultError):
    """Raised when an artifact's sharing policy denies access.

    ``reason`` is a :class:`keyvault.core.models.DenyReason` member. The
    policy is advisory; this only reports what a cooperating client should do.
    """

    def __init__(self, reason, message: str | None = None):
        self.reason = reason
        super().__init__(message or f"access denied by policy: {reason.value}")
