"""Reading OpenAPI and Swagger documents and expanding their ``$ref``s."""

from __future__ import annotations

import json
import logging
from os import PathLike, fspath
from pathlib import Path
from typing import Mapping, cast
from urllib.parse import urldefrag, urlparse
from urllib.request import Request, urlopen

import yaml

from .errors import SpecError
from .openapi import OpenAPIDocument

logger = logging.getLogger(__name__)

OpenAPISource = str | PathLike[str] | Mapping[str, object]

SCHEMA_NAME_KEY = "x-clientsmith-schema-name"
SCHEMA_POINTER_PREFIXES = ("/components/schemas/", "/definitions/")

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})
_FETCH_TIMEOUT = 30


def load_openapi(
    source: OpenAPISource,
    base_path: str | PathLike[str] | None = None,
) -> OpenAPIDocument:
    """Load an OpenAPI 3.x or Swagger 2.0 document and expand its references.

    Args:
        source: A file path, an http(s) URL, or an already parsed mapping
        base_path: Directory that relative file references are read from.
            Defaults to the directory of ``source`` when it is a file.

    Returns:
        A new document in which every ``$ref`` is replaced by its target.
        Named schema targets carry their name under ``SCHEMA_NAME_KEY``.

    Raises:
        SpecError: If the source cannot be parsed, is not an object, has no
            version field, or holds a reference that cannot be followed
    """
    base = Path(base_path) if base_path is not None else None
    if isinstance(source, Mapping):
        document = dict(source)
    else:
        location = fspath(source)
        if _is_url(location):
            prefer_yaml = Path(urlparse(location).path).suffix.lower() in _YAML_SUFFIXES
            document = _parse_object(_fetch_url(location), prefer_yaml=prefer_yaml, origin=location)
        else:
            path = Path(location)
            document = _read_file(path)
            base = base or path.parent

    version = document.get("openapi", document.get("swagger"))
    if not isinstance(version, str):
        raise SpecError("Missing or invalid 'openapi' (or 'swagger') field in document")
    logger.debug("Resolving references of a %s document", version)
    return RefResolver(cast(OpenAPIDocument, document), base).resolve()


def resolve_refs(
    document: OpenAPIDocument,
    base_path: str | PathLike[str] | None = None,
) -> OpenAPIDocument:
    return RefResolver(document, Path(base_path) if base_path is not None else None).resolve()


def load_mapping(path: str | PathLike[str]) -> dict[str, object]:
    """Read a JSON or YAML file that must hold a top-level object."""
    return _read_file(Path(path))


class RefResolver:
    """Expands ``$ref``s into a copy of ``document``.

    A reference points into the document that contains it or, with a file
    part, into another JSON/YAML file relative to that document. A reference
    met again while it is still being expanded stays a literal ``$ref``, so
    recursive schemas terminate. Sibling keys next to a ``$ref`` are laid
    over the expanded target.

    Example:
        >>> RefResolver(document, Path("./specs")).resolve()
    """

    def __init__(self, document: OpenAPIDocument, base_path: Path | None = None) -> None:
        self.document = document
        self.base_path = base_path if base_path is not None else Path.cwd()
        self._files: dict[Path, dict[str, object]] = {}
        self._active: set[tuple[Path | None, str]] = set()

    def resolve(self) -> OpenAPIDocument:
        return cast(OpenAPIDocument, self._expand(self.document, None))

    def _expand(self, node: object, source: Path | None) -> object:
        if isinstance(node, list):
            return [self._expand(item, source) for item in node]
        if not isinstance(node, dict):
            return node
        if "$ref" not in node:
            return {key: self._expand(value, source) for key, value in node.items()}

        ref = node["$ref"]
        if not isinstance(ref, str):
            raise SpecError(f"$ref must be a string, got {type(ref).__name__}")
        target_source, fragment = self._locate(ref, source)
        key = (target_source, fragment)
        if key in self._active:
            return dict(node)

        target = _follow_pointer(self._document(target_source), fragment, ref)
        self._active.add(key)
        try:
            expanded = self._expand(target, target_source)
        finally:
            self._active.discard(key)

        name = _schema_name(fragment)
        if name is not None and isinstance(expanded, dict):
            expanded.setdefault(SCHEMA_NAME_KEY, name)
        siblings = {k: v for k, v in node.items() if k != "$ref"}
        if siblings:
            if not isinstance(expanded, dict):
                raise SpecError(f"$ref target must be an object when merged: {ref}")
            expanded.update(cast(dict[str, object], self._expand(siblings, source)))
        return expanded

    def _locate(self, ref: str, source: Path | None) -> tuple[Path | None, str]:
        file_part, fragment = urldefrag(ref)
        if fragment and not fragment.startswith("/"):
            raise SpecError(f"Unsupported $ref fragment: {ref}")
        if not file_part:
            return source, fragment
        directory = source.parent if source is not None else self.base_path
        return (directory / file_part).resolve(), fragment

    def _document(self, source: Path | None) -> Mapping[str, object]:
        if source is None:
            return self.document
        if source not in self._files:
            logger.debug("Reading referenced document %s", source)
            self._files[source] = _read_file(source)
        return self._files[source]


def _follow_pointer(document: Mapping[str, object], fragment: str, ref: str) -> object:
    node: object = document
    for token in fragment.split("/")[1:]:
        key = token.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            raise SpecError(f"Unresolvable $ref pointer: {ref}")
    return node


def _schema_name(fragment: str) -> str | None:
    for prefix in SCHEMA_POINTER_PREFIXES:
        if fragment.startswith(prefix):
            name = fragment[len(prefix) :]
            if name and "/" not in name:
                return name.replace("~1", "/").replace("~0", "~")
    return None


def _is_url(source: str) -> bool:
    return urlparse(source).scheme in {"http", "https"}


def _fetch_url(url: str) -> str:
    request = Request(url, headers={"User-Agent": "clientsmith"})
    try:
        with urlopen(request, timeout=_FETCH_TIMEOUT) as response:  # noqa: S310
            return response.read().decode("utf-8")
    except (OSError, ValueError) as exc:
        raise SpecError(f"Failed to fetch URL: {url}") from exc


def _read_file(path: Path) -> dict[str, object]:
    text = path.read_text(encoding="utf-8")
    return _parse_object(text, prefer_yaml=path.suffix.lower() in _YAML_SUFFIXES, origin=str(path))


def _parse_object(text: str, *, prefer_yaml: bool, origin: str) -> dict[str, object]:
    if prefer_yaml:
        data = _parse_yaml(text)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = _parse_yaml(text)
    if not isinstance(data, dict):
        raise SpecError(f"{origin} must contain an object")
    return cast(dict[str, object], data)


def _parse_yaml(text: str) -> object:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SpecError(f"Invalid YAML: {exc}") from exc
