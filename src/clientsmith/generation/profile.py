from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationProfile:
    use_future_annotations: bool
    use_pep604: bool
    use_builtin_generics: bool

    @classmethod
    def from_version(cls, target_version: str | tuple[int, int]) -> "GenerationProfile":
        if isinstance(target_version, str):
            parts = target_version.split(".")
            major = int(parts[0])
            minor = int(parts[1]) if len(parts) > 1 else 0
        else:
            major, minor = target_version
        if (major, minor) <= (3, 8):
            return cls(
                use_future_annotations=True,
                use_pep604=False,
                use_builtin_generics=False,
            )
        if (major, minor) == (3, 9):
            return cls(
                use_future_annotations=True,
                use_pep604=False,
                use_builtin_generics=True,
            )
        return cls(
            use_future_annotations=True,
            use_pep604=True,
            use_builtin_generics=True,
        )

    def optional(self, annotation: str) -> str:
        if self.use_pep604:
            return f"{annotation} | None"
        return f"Optional[{annotation}]"

    def list_of(self, annotation: str) -> str:
        return f"list[{annotation}]" if self.use_builtin_generics else f"List[{annotation}]"

    def generic_object(self) -> str:
        return "dict[str, object]" if self.use_builtin_generics else "Dict[str, object]"

    def typing_imports(self, annotations: list[str]) -> list[str]:
        """Return the ``typing`` names the given annotations refer to."""
        names = []
        for name in ("Dict", "List", "Optional"):
            if any(f"{name}[" in annotation for annotation in annotations):
                names.append(name)
        return names
