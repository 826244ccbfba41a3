from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol

from ..errors import ModelIndexError
from ..loader import SCHEMA_NAME_KEY
from ..openapi import SchemaObject

_SEPARATORS = re.compile(r"[^0-9a-z]")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_MODULE_PATH = re.compile(r"^\.*[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


@dataclass(frozen=True)
class ModelEntry:
    type_name: str
    import_location: str | None = None


@dataclass(frozen=True)
class ModelBinding:
    """The outcome of resolving a schema reference against the models index.

    An unresolved binding is a valid result: the generated method then falls
    back to a generic mapping type.
    """

    schema_ref: str
    type_name: str | None = None
    import_location: str | None = None

    @property
    def resolved(self) -> bool:
        return self.type_name is not None


def normalize_name(name: str) -> str:
    return _SEPARATORS.sub("", name.lower())


def schema_name(ref: str) -> str:
    return ref.rsplit("/", 1)[-1]


def schema_ref(schema: SchemaObject | None) -> str | None:
    """Return the reference a schema came from, if it was a named schema."""
    if not isinstance(schema, dict):
        return None
    ref = schema.get("$ref")
    if isinstance(ref, str) and ref:
        return ref
    name = schema.get(SCHEMA_NAME_KEY)
    if isinstance(name, str) and name:
        return f"#/components/schemas/{name}"
    return None


class ModelIndex:
    """Immutable snapshot of schema names to generated model types.

    Example:
        >>> index = ModelIndex.build({"Pet": {"typeName": "Pet", "importLocation": "app.models"}})
        >>> index.lookup("pet")
        ModelEntry(type_name='Pet', import_location='app.models')
    """

    def __init__(self, entries: Mapping[str, ModelEntry]) -> None:
        self._entries = MappingProxyType(dict(entries))
        normalized: dict[str, ModelEntry] = {}
        for name in sorted(self._entries):
            normalized.setdefault(normalize_name(name), self._entries[name])
        self._normalized = MappingProxyType(normalized)

    @classmethod
    def build(cls, mapping: Mapping[str, object]) -> ModelIndex:
        """Build an index from a plain mapping.

        Each value is either a type name string or a mapping with
        ``typeName`` (or ``type_name``) and an optional ``importLocation``
        (or ``import_location``).

        Raises:
            ModelIndexError: If the mapping is malformed
        """
        if not isinstance(mapping, Mapping):
            raise ModelIndexError("Models index must be a mapping of schema names to entries")
        entries: dict[str, ModelEntry] = {}
        for name, value in mapping.items():
            if not isinstance(name, str) or not name:
                raise ModelIndexError(f"Invalid schema name in models index: {name!r}")
            entries[name] = _parse_entry(name, value)
        return cls(entries)

    @classmethod
    def from_schemas(cls, names: Iterable[str], import_location: str | None = None) -> ModelIndex:
        """Index schemas whose model types share the schema name."""
        return cls({name: ModelEntry(type_name=name, import_location=import_location) for name in names})

    @property
    def entries(self) -> Mapping[str, ModelEntry]:
        return self._entries

    def lookup(self, name: str) -> ModelEntry | None:
        entry = self._entries.get(name)
        if entry is not None:
            return entry
        return self._normalized.get(normalize_name(name))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None


def _parse_entry(name: str, value: object) -> ModelEntry:
    if isinstance(value, ModelEntry):
        entry = value
    elif isinstance(value, str):
        entry = ModelEntry(type_name=value)
    elif isinstance(value, Mapping):
        type_name = value.get("typeName", value.get("type_name"))
        import_location = value.get("importLocation", value.get("import_location"))
        if not isinstance(type_name, str):
            raise ModelIndexError(f"Models index entry '{name}' has no typeName")
        if import_location is not None and not isinstance(import_location, str):
            raise ModelIndexError(f"Models index entry '{name}' has a non-string importLocation")
        entry = ModelEntry(type_name=type_name, import_location=import_location)
    else:
        raise ModelIndexError(f"Models index entry '{name}' must be a string or a mapping")

    if not _IDENTIFIER.match(entry.type_name):
        raise ModelIndexError(f"Models index entry '{name}' has an invalid typeName: {entry.type_name!r}")
    if entry.import_location is not None and not _MODULE_PATH.match(entry.import_location):
        raise ModelIndexError(
            f"Models index entry '{name}' has an invalid importLocation: {entry.import_location!r}"
        )
    return entry


class ModelsResolver(Protocol):
    def resolve(self, ref: str) -> ModelBinding: ...


class NoOpModelsResolver:
    def resolve(self, ref: str) -> ModelBinding:
        return ModelBinding(schema_ref=ref)


class IndexModelsResolver:
    def __init__(self, index: ModelIndex) -> None:
        self.index = index

    def resolve(self, ref: str) -> ModelBinding:
        entry = self.index.lookup(schema_name(ref))
        if entry is None:
            return ModelBinding(schema_ref=ref)
        return ModelBinding(schema_ref=ref, type_name=entry.type_name, import_location=entry.import_location)
