from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass
from pathlib import Path

from .generation import GenerationProfile, GenerationWarning, ModelsResolver, WarningSink, generate_client
from .generation.assembler import ClientSurface
from .generation.emitter import render_package_init
from .ir import IRDocument


@dataclass(frozen=True)
class PackageSpec:
    package_name: str
    output_dir: Path


@dataclass(frozen=True)
class GeneratedPackage:
    package_dir: Path
    surface: ClientSurface
    warnings: tuple[GenerationWarning, ...]


def generate_package(
    spec: PackageSpec,
    ir: IRDocument,
    profile: GenerationProfile,
    resolver: ModelsResolver | None = None,
    sink: WarningSink | None = None,
    executor: Executor | None = None,
) -> GeneratedPackage:
    """Write ``client.py`` and ``__init__.py`` of a client package.

    Generated modules are overwritten; other files in the package directory
    are left alone.
    """
    output = generate_client(ir, profile, resolver=resolver, sink=sink, executor=executor)

    package_dir = spec.output_dir / spec.package_name
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "client.py").write_text(output.code, encoding="utf-8")
    (package_dir / "__init__.py").write_text(render_package_init(output.surface), encoding="utf-8")

    return GeneratedPackage(package_dir=package_dir, surface=output.surface, warnings=output.warnings)
