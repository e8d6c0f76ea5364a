"""
Errors surfaced to users.

Failures are classified coarsely: missing configuration, bad input,
gateway status (429 rate limit, 402 credits, anything else generic),
unparseable model replies, missing records and the per-plan usage limit.
"""


class ThumbForgeError(Exception):
    """Base class for all ThumbForge errors."""


class ConfigurationError(ThumbForgeError):
    """A required credential or setting is missing."""


class ValidationError(ThumbForgeError):
    """A request field is missing or malformed."""


class GatewayError(ThumbForgeError):
    """The AI gateway (or another upstream API) failed."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class RateLimitError(GatewayError):
    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message, status=429)


class CreditsExhaustedError(GatewayError):
    def __init__(self, message: str = "Usage limit reached. Please add credits."):
        super().__init__(message, status=402)


class ResponseParseError(GatewayError):
    """The model reply did not contain the JSON we asked for."""


class NotFoundError(ThumbForgeError, LookupError):
    """A stored record does not exist or belongs to another user."""


class UsageLimitError(ThumbForgeError):
    """The user has used up the generations included in their plan."""

    def __init__(self, message: str = "Usage limit reached. Please upgrade your plan."):
        super().__init__(message)
