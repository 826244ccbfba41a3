from __future__ import annotations

import inspect
from typing import Awaitable, Callable, Mapping, TypeVar, Union

from ..runtime.chain import Interceptor
from ..runtime.transport import HttpRequest, HttpResponse, merge_headers

T = TypeVar("T")

RequestTransform = Callable[[HttpRequest], Union[HttpRequest, Awaitable[HttpRequest]]]
ResponseTransform = Callable[[HttpResponse], Union[HttpResponse, Awaitable[HttpResponse]]]


async def _apply(transform: Callable[[T], T | Awaitable[T]], value: T) -> T:
    result = transform(value)
    if inspect.isawaitable(result):
        result = await result
    return result  # type: ignore[return-value]


class TransformerInterceptor(Interceptor):
    """Rewrites requests and responses with sync or async callables.

    Errors pass through untouched.
    """

    def __init__(
        self,
        request_transformer: RequestTransform | None = None,
        response_transformer: ResponseTransform | None = None,
        *,
        replay_on_retry: bool = False,
    ) -> None:
        self.request_transformer = request_transformer
        self.response_transformer = response_transformer
        self.replay_on_retry = replay_on_retry

    async def on_request(self, request: HttpRequest) -> HttpRequest:
        if self.request_transformer is None:
            return request
        return await _apply(self.request_transformer, request)

    async def on_response(self, response: HttpResponse, request: HttpRequest) -> HttpResponse:
        if self.response_transformer is None:
            return response
        return await _apply(self.response_transformer, response)


def chain_transforms(*transforms: Callable[[T], T | Awaitable[T]]) -> Callable[[T], Awaitable[T]]:
    """Compose transforms left to right into one async transform."""

    async def composed(value: T) -> T:
        for transform in transforms:
            value = await _apply(transform, value)
        return value

    return composed


class RequestTransformers:
    @staticmethod
    def add_headers(headers: Mapping[str, str]) -> Callable[[HttpRequest], HttpRequest]:
        def transform(request: HttpRequest) -> HttpRequest:
            return request.with_headers(headers)

        return transform

    @staticmethod
    def modify_url(modifier: Callable[[str], str]) -> Callable[[HttpRequest], HttpRequest]:
        def transform(request: HttpRequest) -> HttpRequest:
            return request.replace(url=modifier(request.url))

        return transform

    @staticmethod
    def transform_body(modifier: Callable[[bytes | None], bytes | None]) -> Callable[[HttpRequest], HttpRequest]:
        def transform(request: HttpRequest) -> HttpRequest:
            return request.replace(body=modifier(request.body))

        return transform


class ResponseTransformers:
    @staticmethod
    def modify_headers(
        modifier: Callable[[Mapping[str, str]], Mapping[str, str]],
    ) -> Callable[[HttpResponse], HttpResponse]:
        def transform(response: HttpResponse) -> HttpResponse:
            return response.replace(headers=dict(modifier(response.headers)))

        return transform

    @staticmethod
    def add_headers(headers: Mapping[str, str]) -> Callable[[HttpResponse], HttpResponse]:
        def transform(response: HttpResponse) -> HttpResponse:
            return response.replace(headers=merge_headers(response.headers, headers))

        return transform

    @staticmethod
    def transform_body(modifier: Callable[[bytes], bytes]) -> Callable[[HttpResponse], HttpResponse]:
        def transform(response: HttpResponse) -> HttpResponse:
            return response.replace(body=modifier(response.body))

        return transform

    @staticmethod
    def normalize_status_codes(mapping: Mapping[int, int]) -> Callable[[HttpResponse], HttpResponse]:
        def transform(response: HttpResponse) -> HttpResponse:
            status = mapping.get(response.status_code)
            if status is None:
                return response
            return response.replace(status_code=status)

        return transform
