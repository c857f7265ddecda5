"""Domain error taxonomy.

Only ModelUnavailable aborts a chat turn. Everything else is contained at
the action boundary and recorded as a failed ActionResult.
"""

from typing import Optional

APOLOGY = "Sorry, I couldn't reach the assistant right now. Please try again in a moment."
REAUTH_MESSAGE = "Spotify session expired. Please sign in again."


class ModelUnavailable(Exception):
    """The language-model call failed outright (timeout, provider error, usage limit)."""

    def __init__(self, cause: str = "", user_message: str = APOLOGY):
        super().__init__(cause or user_message)
        self.user_message = user_message


class SchemaError(Exception):
    """An action request does not match the action registry."""

    def __init__(self, kind: str, message: str):
        super().__init__(f"{kind}: {message}")
        self.kind = kind


class UnknownAction(SchemaError):
    def __init__(self, kind: str):
        super().__init__(kind, "unknown action")


class MissingArgument(SchemaError):
    def __init__(self, kind: str, argument: str):
        super().__init__(kind, f"missing argument '{argument}'")
        self.argument = argument


class WrongType(SchemaError):
    def __init__(self, kind: str, argument: str, detail: str = "wrong type"):
        super().__init__(kind, f"argument '{argument}': {detail}")
        self.argument = argument


class ArgumentOutOfRange(WrongType):
    pass


class GatewayError(Exception):
    """The playback API rejected a call or could not be reached."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class GatewayAuthError(GatewayError):
    """Bearer credential missing or expired. Not retryable."""

    def __init__(self, message: str = REAUTH_MESSAGE, status: Optional[int] = 401):
        super().__init__(message, status=status)


class ActionFailed(Exception):
    """A handler completed its calls but the action did not achieve its goal."""
