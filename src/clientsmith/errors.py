from __future__ import annotations

from collections.abc import Mapping


class ClientsmithError(Exception):
    """Base class for every error raised by clientsmith."""


class SpecError(ClientsmithError):
    """The document cannot be used for generation at all."""


class ModelIndexError(SpecError):
    """The models index could not be built."""


class ConfigValidationError(ClientsmithError):
    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        lines = "\n".join(f"  - {problem}" for problem in self.problems)
        super().__init__(f"Configuration validation failed:\n{lines}")


class ApiError(ClientsmithError):
    """Base class for errors surfaced by a client call.

    Attributes:
        message: Human-readable description
        status_code: HTTP status, when a response was received
        headers: Response headers, when a response was received
        body: Raw response body, when a response was received
        context: Extra details about where the error happened
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body
        self.context = dict(context or {})
        super().__init__(str(self))

    def __str__(self) -> str:
        name = type(self).__name__
        if self.status_code is not None:
            return f"{name} (status: {self.status_code}): {self.message}"
        return f"{name}: {self.message}"


class AuthError(ApiError):
    pass


class ServerError(ApiError):
    pass


class ClientError(ApiError):
    pass


class RequestTimeoutError(ApiError):
    pass


class CircuitOpenError(ApiError):
    pass


class RateLimitError(ApiError):
    pass


class TransportError(ApiError):
    pass


class DecodeError(ApiError):
    """The response body could not be decoded into the declared shape."""
