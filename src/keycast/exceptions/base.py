"""Root of the keycast exception hierarchy."""

from typing import Optional


class KeycastError(Exception):
    """
    Error meant to be shown to a person.

    ``str(error)`` is the short message for the terminal; ``technical_message``
    goes to the log. ``recovery_hint`` says what to change, when we know.
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.recovery_hint = recovery_hint

    def __str__(self) -> str:
        return self.user_message
