from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby
from typing import Iterable

from .methods import MethodDescriptor
from .naming import pascal_case

# members of the generated root client that a resource attribute must not shadow
RESERVED_ATTRIBUTES = frozenset(
    {
        "close",
        "closed",
        "config",
        "invoke",
        "request",
        "resources",
        "with_headers",
    }
)


@dataclass(frozen=True)
class ResourceGroup:
    name: str
    attribute: str
    class_name: str
    methods: tuple[MethodDescriptor, ...]


@dataclass(frozen=True)
class ClientSurface:
    """The generated client, before rendering: a root plus its resource groups."""

    title: str
    class_name: str
    groups: tuple[ResourceGroup, ...]

    @property
    def methods(self) -> tuple[MethodDescriptor, ...]:
        return tuple(method for group in self.groups for method in group.methods)

    def group(self, name: str) -> ResourceGroup:
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(name)


def assemble_client(
    methods: Iterable[MethodDescriptor],
    title: str = "",
    class_name: str = "Client",
) -> ClientSurface:
    ordered = sorted(methods, key=lambda method: (method.group, method.name))
    groups: list[ResourceGroup] = []
    used_class_names = {class_name}
    for name, members in groupby(ordered, key=lambda method: method.group):
        attribute = f"{name}_" if name in RESERVED_ATTRIBUTES else name
        group_class = f"{pascal_case(name) or 'Default'}Api"
        while group_class in used_class_names:
            group_class = f"{group_class}_"
        used_class_names.add(group_class)
        groups.append(
            ResourceGroup(
                name=name,
                attribute=attribute,
                class_name=group_class,
                methods=tuple(members),
            )
        )
    return ClientSurface(title=title, class_name=class_name, groups=tuple(groups))
