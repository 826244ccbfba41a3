from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping
from urllib.parse import urlparse

from ..errors import ConfigValidationError
from .transport import TransportAdapter, merge_headers

if TYPE_CHECKING:
    from .chain import Interceptor

NAMED_ADAPTERS = ("httpx", "aiohttp", "requests")
CUSTOM_ADAPTER = "custom"
DEFAULT_ADAPTER = "httpx"
DEFAULT_TIMEOUT = 30.0

_AUTH_KEYS = {
    "apiKeyHeader": "api_key_header",
    "apiKeyQuery": "api_key_query",
    "apiKey": "api_key",
    "bearerToken": "bearer_token",
    "bearerTokenEnv": "bearer_token_env",
}


@dataclass(frozen=True)
class AuthConfig:
    """Credentials merged into every call.

    The API key travels in a header (``api_key_header``) or a query parameter
    (``api_key_query``). The bearer token is either given directly or read
    from the environment variable named by ``bearer_token_env``.
    """

    api_key_header: str | None = None
    api_key_query: str | None = None
    api_key: str | None = None
    bearer_token: str | None = None
    bearer_token_env: str | None = None

    def resolve_bearer_token(self, environ: Mapping[str, str] | None = None) -> str | None:
        if self.bearer_token is not None:
            return self.bearer_token
        if self.bearer_token_env is None:
            return None
        source = os.environ if environ is None else environ
        return source.get(self.bearer_token_env) or None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> AuthConfig:
        values: dict[str, object] = {}
        for key, value in data.items():
            name = _AUTH_KEYS.get(key, key)
            if name in _AUTH_KEYS.values() and value is not None:
                values[name] = str(value)
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ClientConfig:
    """Final, merged configuration of a client.

    Attributes:
        base_url: Absolute base URL; paths are appended to it
        default_headers: Headers sent with every call
        timeout: Per-request deadline in seconds, ``None`` for no deadline
        auth: Credentials merged into every call
        adapter: "httpx", "aiohttp", "requests" or "custom"; when unset, a
            given ``transport`` implies "custom" and otherwise "httpx" is used
        transport: The adapter instance for the "custom" adapter
        interceptors: Interceptors in declaration order
    """

    base_url: str
    default_headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float | None = DEFAULT_TIMEOUT
    auth: AuthConfig | None = None
    adapter: str | None = None
    transport: TransportAdapter | None = None
    interceptors: tuple[Interceptor, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_headers", MappingProxyType(dict(self.default_headers)))
        object.__setattr__(self, "interceptors", tuple(self.interceptors))

    @property
    def adapter_name(self) -> str:
        if self.adapter is not None:
            return self.adapter
        return CUSTOM_ADAPTER if self.transport is not None else DEFAULT_ADAPTER

    def with_headers(self, headers: Mapping[str, str]) -> ClientConfig:
        return dataclasses.replace(self, default_headers=merge_headers(self.default_headers, headers))

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, object],
        environment: str | None = None,
        *,
        transport: TransportAdapter | None = None,
        interceptors: tuple[Interceptor, ...] = (),
    ) -> ClientConfig:
        """Build a config from parsed settings, overlaying an environment profile.

        Keys may be camelCase (``baseUrl``) or snake_case (``base_url``).
        Profile values replace base values, except headers, which are merged.

        Example:
            >>> data = {
            ...     "baseUrl": "https://api.example.com",
            ...     "environments": {"staging": {"baseUrl": "https://staging.example.com"}},
            ... }
            >>> ClientConfig.from_mapping(data, "staging").base_url
            'https://staging.example.com'

        Raises:
            ConfigValidationError: If the environment profile does not exist
                or a value has the wrong type
        """
        base = _normalize(data)
        if environment is not None:
            environments = data.get("environments", {})
            profile = environments.get(environment) if isinstance(environments, Mapping) else None
            if not isinstance(profile, Mapping):
                raise ConfigValidationError([f"unknown environment: {environment}"])
            overlay = _normalize(profile)
            base_headers = base.get("default_headers", {})
            overlay_headers = overlay.get("default_headers", {})
            base.update(overlay)
            if isinstance(base_headers, Mapping) and isinstance(overlay_headers, Mapping):
                base["default_headers"] = merge_headers(base_headers, overlay_headers)

        problems: list[str] = []
        base_url = base.get("base_url")
        if not isinstance(base_url, str):
            problems.append("base_url is required")
        headers = base.get("default_headers", {})
        if not isinstance(headers, Mapping):
            problems.append("default_headers must be a mapping")
        timeout = base.get("timeout", DEFAULT_TIMEOUT)
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float))):
            problems.append("timeout must be a number of seconds")
        auth = base.get("auth")
        if auth is not None and not isinstance(auth, Mapping):
            problems.append("auth must be a mapping")
        if problems:
            raise ConfigValidationError(problems)

        return cls(
            base_url=str(base_url),
            default_headers={str(k): str(v) for k, v in headers.items()},
            timeout=float(timeout) if timeout is not None else None,
            auth=AuthConfig.from_mapping(auth) if auth is not None else None,
            adapter=base.get("adapter"),
            transport=transport,
            interceptors=interceptors,
        )


def _normalize(data: Mapping[str, object]) -> dict[str, object]:
    aliases = {
        "baseUrl": "base_url",
        "headers": "default_headers",
        "defaultHeaders": "default_headers",
        "httpAdapter": "adapter",
    }
    result: dict[str, object] = {}
    for key, value in data.items():
        if key == "environments":
            continue
        result[aliases.get(key, key)] = value
    return result


def validate_config(config: ClientConfig) -> None:
    """Check a config before any call is made.

    Raises:
        ConfigValidationError: Listing every problem found
    """
    problems: list[str] = []

    parsed = urlparse(config.base_url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        problems.append(f"base_url must be an absolute http(s) URL: {config.base_url!r}")

    if config.timeout is not None and config.timeout <= 0:
        problems.append("timeout must be positive")

    auth = config.auth
    if auth is not None:
        has_name = auth.api_key_header is not None or auth.api_key_query is not None
        if auth.api_key is not None and not has_name:
            problems.append("api_key requires api_key_header or api_key_query")
        if auth.api_key is None and has_name:
            problems.append("api_key_header/api_key_query given without api_key")
        if auth.api_key_header is not None and auth.api_key_query is not None:
            problems.append("api_key_header and api_key_query are mutually exclusive")
        if auth.bearer_token is not None and auth.bearer_token_env is not None:
            problems.append("bearer_token and bearer_token_env are mutually exclusive")

    name = config.adapter_name
    if name not in (*NAMED_ADAPTERS, CUSTOM_ADAPTER):
        problems.append(f"unsupported adapter: {name!r}")
    elif name == CUSTOM_ADAPTER and config.transport is None:
        problems.append("the custom adapter requires a transport")
    elif name != CUSTOM_ADAPTER and config.transport is not None:
        problems.append(f"a transport was given but the adapter is {name!r}")

    if problems:
        raise ConfigValidationError(problems)
