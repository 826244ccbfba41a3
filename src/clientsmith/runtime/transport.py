from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Mapping, Protocol

from ..generation.params import format_primitive


@dataclass(frozen=True)
class HttpRequest:
    """A fully prepared request as it travels through the interceptor chain.

    Attributes:
        method: Upper-case HTTP method
        url: Absolute URL including the query string
        headers: Request headers
        body: Encoded body, if any
        form: Multipart fields, encoded by the transport adapter
        timeout: Deadline for the network send, in seconds
        attempt: Zero for the first send of a call, incremented on each retry
        extensions: Per-call values interceptors attach for themselves; kept
            across replays of the same call
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    form: Mapping[str, object] | None = None
    timeout: float | None = None
    attempt: int = 0
    extensions: Mapping[str, object] = field(default_factory=dict)

    def replace(self, **changes: object) -> HttpRequest:
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]

    def with_headers(self, headers: Mapping[str, str]) -> HttpRequest:
        return self.replace(headers=merge_headers(self.headers, headers))


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str, default: str | None = None) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def replace(self, **changes: object) -> HttpResponse:
        return dataclasses.replace(self, **changes)  # type: ignore[arg-type]


class TransportAdapter(Protocol):
    async def send(self, request: HttpRequest) -> HttpResponse: ...

    async def close(self) -> None: ...


def merge_headers(base: Mapping[str, str], overrides: Mapping[str, str]) -> dict[str, str]:
    """Merge headers; names compare case-insensitively and overrides win."""
    replaced = {key.lower() for key in overrides}
    merged = {key: value for key, value in base.items() if key.lower() not in replaced}
    merged.update(overrides)
    return merged


def split_form(form: Mapping[str, object]) -> tuple[dict[str, str], dict[str, tuple]]:
    """Split multipart fields into plain values and file parts.

    ``bytes`` values and ``(filename, content[, content_type])`` tuples are
    file parts. Everything else is sent as text; ``None`` values are skipped.
    """
    data: dict[str, str] = {}
    files: dict[str, tuple] = {}
    for name, value in form.items():
        if value is None:
            continue
        if isinstance(value, (bytes, bytearray)):
            files[name] = (name, bytes(value))
        elif isinstance(value, tuple):
            files[name] = value
        else:
            data[name] = format_primitive(value)
    return data, files
