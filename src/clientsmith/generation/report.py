from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class WarningKind(str, Enum):
    MISSING_OPERATION_ID = "missingOperationId"
    INVALID_OPERATION_ID = "invalidOperationId"
    UNSUPPORTED_PATH_PARAMETER = "unsupportedPathParameter"
    UNSUPPORTED_QUERY_PARAMETER = "unsupportedQueryParameter"
    DUPLICATE_PARAMETER_NAME = "duplicateParameterName"
    PATH_TEMPLATE_MISMATCH = "pathTemplateMismatch"
    UNSUPPORTED_REQUEST_BODY = "unsupportedRequestBody"
    DUPLICATE_METHOD_NAME = "duplicateMethodName"
    IGNORED_PARAMETER = "ignoredParameter"


@dataclass(frozen=True)
class GenerationWarning:
    """A non-fatal, per-operation generation issue.

    ``excluded`` tells whether the operation was dropped from the output or
    only partially affected (e.g. an ignored header parameter).
    """

    kind: WarningKind
    method: str
    path: str
    message: str
    excluded: bool = True

    def __str__(self) -> str:
        return f"[WARNING] {self.method.upper()} {self.path}: {self.message}"


WarningSink = Callable[[GenerationWarning], None]


@dataclass
class WarningCollector:
    """Collects warnings in order and forwards each one to an optional sink."""

    sink: WarningSink | None = None
    warnings: list[GenerationWarning] = field(default_factory=list)

    def __call__(self, warning: GenerationWarning) -> None:
        self.warnings.append(warning)
        logger.debug("%s", warning)
        if self.sink is not None:
            self.sink(warning)
