from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass

from ..ir import IRDocument
from .assembler import ClientSurface, assemble_client
from .emitter import render_client
from .methods import synthesize_methods
from .models import ModelsResolver
from .profile import GenerationProfile
from .report import GenerationWarning, WarningSink


@dataclass
class ClientOutput:
    code: str
    surface: ClientSurface
    warnings: tuple[GenerationWarning, ...]


def generate_client(
    document: IRDocument,
    profile: GenerationProfile,
    resolver: ModelsResolver | None = None,
    sink: WarningSink | None = None,
    executor: Executor | None = None,
) -> ClientOutput:
    result = synthesize_methods(document, resolver, sink, executor=executor)
    surface = assemble_client(result.methods, title=document.title)
    return ClientOutput(
        code=render_client(surface, profile),
        surface=surface,
        warnings=result.warnings,
    )
