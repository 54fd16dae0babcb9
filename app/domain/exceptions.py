from __future__ import annotations


class InputValidationError(Exception):
    """Raised when the inbound request fails a rule the body schema cannot express."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(Exception):
    """Raised when the server is missing required configuration (e.g. the provider key)."""

    def __init__(self, *, env_var: str):
        self.env_var = env_var
        self.message = f"API key not configured. Please set {env_var} environment variable."
        super().__init__(self.message)


class ResponseParseError(Exception):
    """
    Raised when provider output cannot be turned into a correction result.

    `raw_text` is kept for server-side diagnostics only and must never be
    returned to the caller.
    """

    kind = "invalid"

    def __init__(self, message: str, *, raw_text: str):
        super().__init__(message)
        self.message = message
        self.raw_text = raw_text


class UnparsableResponseError(ResponseParseError):
    """The provider text never yielded valid JSON."""

    kind = "unparsable"


class InvalidShapeError(ResponseParseError):
    """The provider text parsed as JSON but required fields are missing or mistyped."""

    kind = "invalid_shape"
