from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, ClassVar, Mapping, TypeVar

from ..errors import ApiError, DecodeError, TransportError
from ..generation.content import BodyEncoding
from ..generation.methods import MethodDescriptor, interpolate_path
from ..generation.response import ResponseShape
from .adapters import create_adapter
from .chain import InterceptorChain
from .codec import build_url, decode_response, encode_body, raise_for_status
from .config import ClientConfig, validate_config
from .transport import HttpRequest, merge_headers

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT", bound="ApiClient")


class _SharedTransport:
    """The chain and adapter shared by a client and its header-scoped clones."""

    def __init__(self, chain: InterceptorChain) -> None:
        self.chain = chain
        self.closed = False

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        logger.debug("Closing transport %s", type(self.chain.adapter).__name__)
        await self.chain.adapter.close()


class ResourceClient:
    """Base class of generated resource groups."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        return await self._client.request(method, path, **kwargs)


class ApiClient:
    """Runtime facade behind every generated client.

    Generated subclasses list their resource groups in ``resources``; each is
    instantiated as an attribute of the client.

    Example:
        >>> async with Client(ClientConfig(base_url="https://api.example.com")) as client:
        ...     pets = await client.pets.list_pets(limit=10)
    """

    resources: ClassVar[Mapping[str, type[ResourceClient]]] = {}

    def __init__(self, config: ClientConfig, *, _shared: _SharedTransport | None = None) -> None:
        if _shared is None:
            validate_config(config)
            _shared = _SharedTransport(InterceptorChain(create_adapter(config), config.interceptors))
        self._config = config
        self._shared = _shared
        for attribute, resource in self.resources.items():
            setattr(self, attribute, resource(self))

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._shared.closed

    def with_headers(self: ClientT, headers: Mapping[str, str]) -> ClientT:
        """Return a client sharing this one's transport, with extra default headers."""
        return type(self)(self._config.with_headers(headers), _shared=self._shared)

    async def close(self) -> None:
        await self._shared.close()

    async def __aenter__(self: ClientT) -> ClientT:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        path_params: Mapping[str, object] | None = None,
        query_params: Mapping[str, object] | None = None,
        body: Any = None,
        content_type: str | None = None,
        body_encoding: BodyEncoding | str = BodyEncoding.NONE,
        response_shape: ResponseShape | str = ResponseShape.SINGLE_OBJECT,
        model: type | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        if self._shared.closed:
            raise TransportError("Client is closed", context={"method": method, "path": path})
        shape = ResponseShape(response_shape)
        encoding = BodyEncoding(body_encoding)

        resolved_path = interpolate_path(path, path_params or {}, strict=False)

        query = dict(query_params or {})
        request_headers = dict(self._config.default_headers)
        request_headers = self._apply_auth(request_headers, query)
        if headers:
            request_headers = merge_headers(request_headers, headers)

        encoded = encode_body(body, content_type, encoding)
        if encoded.content_type is not None:
            request_headers = merge_headers(request_headers, {"Content-Type": encoded.content_type})

        http_request = HttpRequest(
            method=method.upper(),
            url=build_url(self._config.base_url, resolved_path, query),
            headers=request_headers,
            body=encoded.content,
            form=encoded.form,
            timeout=self._config.timeout,
        )
        try:
            response = await self._shared.chain.send(http_request)
        except ApiError:
            raise
        except Exception as exc:
            raise TransportError(
                f"{method.upper()} {path} failed: {exc}",
                context={"method": method.upper(), "path": path},
            ) from exc

        raise_for_status(response, method.upper(), path)
        try:
            return decode_response(response, shape, model)
        except ApiError:
            raise
        except Exception as exc:
            raise DecodeError(
                f"Could not build {getattr(model, '__name__', model)} from the response: {exc}",
                status_code=response.status_code,
                headers=response.headers,
                body=response.body,
            ) from exc

    async def invoke(self, descriptor: MethodDescriptor, model: type | None = None, /, **arguments: Any) -> Any:
        """Call a synthesized method without generated code.

        Arguments are passed by their Python names, as in the generated
        signature.

        Raises:
            TypeError: If a required argument is missing or an argument is unknown
        """
        known = {param.python_name for param in descriptor.parameters}
        if descriptor.body is not None and descriptor.body_encoding is not BodyEncoding.UNSUPPORTED:
            known.add("body")
        unknown = sorted(set(arguments) - known)
        if unknown:
            raise TypeError(f"{descriptor.name}() got unexpected arguments: {', '.join(unknown)}")
        missing = [
            param.python_name
            for param in descriptor.parameters
            if param.required and param.python_name not in arguments
        ]
        if "body" in known and descriptor.body is not None and descriptor.body.required and "body" not in arguments:
            missing.append("body")
        if missing:
            raise TypeError(f"{descriptor.name}() missing required arguments: {', '.join(missing)}")

        return await self.request(
            descriptor.http_method,
            descriptor.path_template,
            path_params={param.name: arguments[param.python_name] for param in descriptor.path_params},
            query_params={param.name: arguments.get(param.python_name) for param in descriptor.query_params},
            body=arguments.get("body"),
            content_type=descriptor.body.content_type if descriptor.body is not None else None,
            body_encoding=descriptor.body_encoding,
            response_shape=descriptor.response_shape,
            model=model,
        )

    def _apply_auth(self, headers: dict[str, str], query: dict[str, object]) -> dict[str, str]:
        auth = self._config.auth
        if auth is None:
            return headers
        if auth.api_key is not None:
            if auth.api_key_query is not None:
                query[auth.api_key_query] = auth.api_key
            elif auth.api_key_header is not None:
                headers = merge_headers(headers, {auth.api_key_header: auth.api_key})
        token = auth.resolve_bearer_token()
        if token:
            headers = merge_headers(headers, {"Authorization": f"Bearer {token}"})
        return headers
