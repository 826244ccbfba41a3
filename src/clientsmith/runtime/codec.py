from __future__ import annotations

import dataclasses
import json
from typing import Any, Mapping
from urllib.parse import urlencode

from ..errors import ApiError, AuthError, ClientError, DecodeError, ServerError
from ..generation.content import BodyEncoding, media_type
from ..generation.params import format_primitive
from ..generation.response import ResponseShape
from .transport import HttpResponse

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


@dataclasses.dataclass(frozen=True)
class EncodedBody:
    content: bytes | None = None
    form: Mapping[str, object] | None = None
    content_type: str | None = None


def build_url(base_url: str, path: str, query: Mapping[str, object] | None = None) -> str:
    url = base_url.rstrip("/") + (path if path.startswith("/") else f"/{path}")
    pairs = [(name, format_primitive(value)) for name, value in (query or {}).items() if value is not None]
    if pairs:
        url += ("&" if "?" in url else "?") + urlencode(pairs)
    return url


def to_jsonable(value: Any) -> Any:
    """Convert a model instance into plain JSON-compatible data."""
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def encode_body(body: Any, content_type: str | None, encoding: BodyEncoding) -> EncodedBody:
    if body is None or encoding in (BodyEncoding.NONE, BodyEncoding.UNSUPPORTED):
        return EncodedBody()
    if encoding is BodyEncoding.PRIMITIVE_STRING:
        payload = body if isinstance(body, bytes) else str(body).encode("utf-8")
        return EncodedBody(content=payload, content_type=content_type or "text/plain")

    kind = media_type(content_type) if content_type else JSON_CONTENT_TYPE
    data = to_jsonable(body)
    if kind == MULTIPART_CONTENT_TYPE:
        if not isinstance(data, Mapping):
            raise TypeError("multipart bodies must be mappings")
        # the transport sets the boundary
        return EncodedBody(form=dict(data))
    if kind == FORM_CONTENT_TYPE:
        if not isinstance(data, Mapping):
            raise TypeError("form bodies must be mappings")
        pairs = [(name, format_primitive(value)) for name, value in data.items() if value is not None]
        return EncodedBody(content=urlencode(pairs).encode("utf-8"), content_type=content_type)
    payload = json.dumps(data, ensure_ascii=False).encode("utf-8")
    if kind == JSON_CONTENT_TYPE or kind.endswith("+json") or not kind.startswith("text/"):
        return EncodedBody(content=payload, content_type=content_type or JSON_CONTENT_TYPE)
    return EncodedBody(content=payload, content_type=content_type)


def raise_for_status(response: HttpResponse, method: str, path: str) -> None:
    """Map a non-2xx response to a typed error."""
    if response.is_success:
        return
    status = response.status_code
    error_type: type[ApiError]
    if status in (401, 403):
        error_type = AuthError
    elif status >= 500:
        error_type = ServerError
    else:
        error_type = ClientError
    raise error_type(
        f"{method} {path} failed with status {status}",
        status_code=status,
        headers=response.headers,
        body=response.body,
        context={"method": method, "path": path},
    )


def decode_response(response: HttpResponse, shape: ResponseShape, model: type | None = None) -> Any:
    if shape is ResponseShape.EMPTY or not response.body:
        return None
    content_type = response.header("content-type")
    kind = media_type(content_type) if content_type else JSON_CONTENT_TYPE
    if kind.startswith("text/") and "json" not in kind:
        return response.text
    try:
        data = json.loads(response.body)
    except ValueError as exc:
        raise DecodeError(
            f"Response body is not valid JSON: {exc}",
            status_code=response.status_code,
            headers=response.headers,
            body=response.body,
        ) from exc
    if model is None:
        return data
    if shape is ResponseShape.COLLECTION_OF_OBJECTS:
        if not isinstance(data, list):
            raise DecodeError(
                "Expected a JSON array",
                status_code=response.status_code,
                headers=response.headers,
                body=response.body,
            )
        return [build_model(model, item) for item in data]
    return build_model(model, data)


def build_model(model: type, data: Any) -> Any:
    if not isinstance(data, Mapping):
        return data
    if hasattr(model, "from_dict"):
        return model.from_dict(data)
    if hasattr(model, "model_validate"):
        return model.model_validate(data)
    return model(**data)
