from __future__ import annotations

import pytest

from clientsmith.errors import ConfigValidationError
from clientsmith.runtime.config import AuthConfig, ClientConfig, validate_config
from clientsmith.runtime.transport import HttpRequest, HttpResponse


class NullTransport:
    async def send(self, request: HttpRequest) -> HttpResponse:
        return HttpResponse(200)

    async def close(self) -> None:
        pass


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig(base_url="https://api.example.com")
        assert config.timeout == 30.0
        assert config.adapter_name == "httpx"
        assert config.interceptors == ()
        validate_config(config)

    def test_transport_implies_custom_adapter(self) -> None:
        config = ClientConfig(base_url="https://api.example.com", transport=NullTransport())
        assert config.adapter_name == "custom"
        validate_config(config)

    def test_headers_are_read_only(self) -> None:
        config = ClientConfig(base_url="https://api.example.com", default_headers={"X-App": "demo"})
        with pytest.raises(TypeError):
            config.default_headers["X-Other"] = "1"  # type: ignore[index]

    def test_with_headers_returns_new_config(self) -> None:
        config = ClientConfig(base_url="https://api.example.com", default_headers={"X-App": "demo"})
        scoped = config.with_headers({"x-app": "other", "X-Trace": "1"})
        assert dict(scoped.default_headers) == {"x-app": "other", "X-Trace": "1"}
        assert dict(config.default_headers) == {"X-App": "demo"}


class TestFromMapping:
    def test_camel_case_keys(self) -> None:
        config = ClientConfig.from_mapping(
            {
                "baseUrl": "https://api.example.com",
                "defaultHeaders": {"X-App": "demo"},
                "timeout": 5,
                "httpAdapter": "aiohttp",
                "auth": {"apiKeyHeader": "X-API-Key", "apiKey": "k1"},
            }
        )
        assert config.base_url == "https://api.example.com"
        assert dict(config.default_headers) == {"X-App": "demo"}
        assert config.timeout == 5.0
        assert config.adapter_name == "aiohttp"
        assert config.auth == AuthConfig(api_key_header="X-API-Key", api_key="k1")

    def test_environment_overlay(self) -> None:
        data = {
            "base_url": "https://api.example.com",
            "headers": {"X-App": "demo", "X-Env": "prod"},
            "environments": {
                "staging": {"baseUrl": "https://staging.example.com", "headers": {"x-env": "staging"}},
            },
        }
        config = ClientConfig.from_mapping(data, "staging")
        assert config.base_url == "https://staging.example.com"
        assert dict(config.default_headers) == {"X-App": "demo", "x-env": "staging"}

    def test_unknown_environment(self) -> None:
        with pytest.raises(ConfigValidationError, match="unknown environment: qa"):
            ClientConfig.from_mapping({"base_url": "https://api.example.com"}, "qa")

    def test_collects_type_problems(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            ClientConfig.from_mapping({"headers": [], "timeout": "soon", "auth": "token"})
        assert exc_info.value.problems == [
            "base_url is required",
            "default_headers must be a mapping",
            "timeout must be a number of seconds",
            "auth must be a mapping",
        ]


class TestValidateConfig:
    @pytest.mark.parametrize(
        "config, problem",
        [
            pytest.param(ClientConfig(base_url="api.example.com"), "absolute http(s) URL", id="relative-url"),
            pytest.param(ClientConfig(base_url="ftp://example.com"), "absolute http(s) URL", id="scheme"),
            pytest.param(ClientConfig(base_url="https://a.example", timeout=0), "positive", id="timeout"),
            pytest.param(
                ClientConfig(base_url="https://a.example", auth=AuthConfig(api_key="k")),
                "requires api_key_header",
                id="key-without-name",
            ),
            pytest.param(
                ClientConfig(base_url="https://a.example", auth=AuthConfig(api_key_header="X-Key")),
                "without api_key",
                id="name-without-key",
            ),
            pytest.param(
                ClientConfig(
                    base_url="https://a.example",
                    auth=AuthConfig(api_key_header="X-Key", api_key_query="key", api_key="k"),
                ),
                "mutually exclusive",
                id="header-and-query",
            ),
            pytest.param(
                ClientConfig(base_url="https://a.example", auth=AuthConfig(bearer_token="t", bearer_token_env="T")),
                "mutually exclusive",
                id="bearer-twice",
            ),
            pytest.param(
                ClientConfig(base_url="https://a.example", adapter="curl"), "unsupported adapter", id="adapter"
            ),
            pytest.param(
                ClientConfig(base_url="https://a.example", adapter="custom"), "requires a transport", id="custom"
            ),
            pytest.param(
                ClientConfig(base_url="https://a.example", adapter="httpx", transport=NullTransport()),
                "transport was given",
                id="transport-mismatch",
            ),
        ],
    )
    def test_rejects_invalid_config(self, config: ClientConfig, problem: str) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(config)
        assert any(problem in item for item in exc_info.value.problems)

    def test_lists_every_problem(self) -> None:
        config = ClientConfig(base_url="nope", timeout=-1, adapter="curl")
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config(config)
        assert len(exc_info.value.problems) == 3


class TestAuthConfig:
    def test_bearer_token_from_environment(self) -> None:
        auth = AuthConfig(bearer_token_env="API_TOKEN")
        assert auth.resolve_bearer_token({"API_TOKEN": "t1"}) == "t1"
        assert auth.resolve_bearer_token({"API_TOKEN": ""}) is None
        assert auth.resolve_bearer_token({}) is None

    def test_direct_bearer_token(self) -> None:
        assert AuthConfig(bearer_token="t2").resolve_bearer_token({}) == "t2"

    def test_from_mapping_ignores_unknown_keys(self) -> None:
        auth = AuthConfig.from_mapping({"bearerTokenEnv": "API_TOKEN", "scope": "read"})
        assert auth == AuthConfig(bearer_token_env="API_TOKEN")
