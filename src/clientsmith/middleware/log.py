from __future__ import annotations

import logging
from typing import Collection, Mapping

from ..runtime.chain import Interceptor
from ..runtime.transport import HttpRequest, HttpResponse

DEFAULT_REDACTED_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})


class LoggingInterceptor(Interceptor):
    replay_on_retry = True

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        level: int = logging.INFO,
        log_headers: bool = False,
        log_body: bool = False,
        max_body_length: int = 1000,
        redact_headers: Collection[str] = DEFAULT_REDACTED_HEADERS,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.level = level
        self.log_headers = log_headers
        self.log_body = log_body
        self.max_body_length = max_body_length
        self.redact_headers = frozenset(name.lower() for name in redact_headers)

    async def on_request(self, request: HttpRequest) -> HttpRequest:
        self.logger.log(self.level, "--> %s %s (attempt %d)", request.method, request.url, request.attempt + 1)
        if self.log_headers:
            self.logger.log(self.level, "--> headers: %s", self._headers(request.headers))
        if self.log_body and request.body:
            self.logger.log(self.level, "--> body: %s", self._body(request.body))
        return request

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        self.logger.log(
            self.level,
            "<-- %d %s %s (%d bytes)",
            response.status_code,
            request.method,
            request.url,
            len(response.body),
        )
        if self.log_headers:
            self.logger.log(self.level, "<-- headers: %s", self._headers(response.headers))
        if self.log_body and response.body:
            self.logger.log(self.level, "<-- body: %s", self._body(response.body))
        return response

    async def on_error(self, error: Exception, request: HttpRequest) -> HttpResponse:
        self.logger.log(
            max(self.level, logging.WARNING),
            "<-- %s %s failed: %s",
            request.method,
            request.url,
            error,
        )
        raise error

    def _headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        return {key: "***" if key.lower() in self.redact_headers else value for key, value in headers.items()}

    def _body(self, body: bytes) -> str:
        text = body.decode("utf-8", errors="replace")
        if len(text) > self.max_body_length:
            return f"{text[: self.max_body_length]}... ({len(text)} chars)"
        return text
