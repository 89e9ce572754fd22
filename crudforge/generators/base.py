# File: crudforge/generators/base.py
"""
crudforge - Base Generator
============================
Shared context for every artifact generator plus the small text-assembly
helper all of them use.

A generator instance is scoped to exactly one (model, FeatureResolution)
pair and holds no other state, so instances for different models can run
side by side.  Output text is assembled from lists of lines joined with
``"\\n"``; no timestamps or other run-dependent values are emitted, which
keeps output byte-identical across runs.
"""

from __future__ import annotations

import abc
import logging
from typing import Dict, Iterable, List, Sequence

from crudforge.features import FeatureResolution, resolve_features
from crudforge.models import (
    GenerationConfig,
    GeneratorOutput,
    IdType,
    OutputMetadata,
    ParsedModel,
)
from crudforge.strategies import FrameworkStrategy
from crudforge.utils import count_lines, lower_first, to_kebab_case, to_plural

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.base")

GENERATED_HEADER: str = "// Generated by crudforge. Do not edit by hand."

_ID_TS_TYPES: Dict[IdType, str] = {
    IdType.NUMBER: "number",
    IdType.BIGINT: "bigint",
    IdType.UUID: "string",
    IdType.CUID: "string",
    IdType.STRING: "string",
}


# ---------------------------------------------------------------------------
# Text assembly
# ---------------------------------------------------------------------------


class TemplateBuilder:
    """
    Collects an import block and code blocks, then joins them.

    A header comment, when given, sits directly above the imports.
    Imports are de-duplicated in first-seen order and always come first.
    Blocks are emitted in exactly the order they were added, separated by
    one blank line; empty blocks are skipped.  The result ends with a single
    newline.
    """

    __slots__ = ("_header", "_imports", "_blocks")

    def __init__(self, header: str = GENERATED_HEADER) -> None:
        self._header: str = header
        self._imports: List[str] = []
        self._blocks: List[str] = []

    def import_line(self, line: str) -> "TemplateBuilder":
        if line and line not in self._imports:
            self._imports.append(line)
        return self

    def imports(self, lines: Iterable[str]) -> "TemplateBuilder":
        for line in lines:
            self.import_line(line)
        return self

    def block(self, text: str) -> "TemplateBuilder":
        self._blocks.append(text)
        return self

    def blocks(self, texts: Iterable[str]) -> "TemplateBuilder":
        for text in texts:
            self.block(text)
        return self

    @property
    def import_lines(self) -> List[str]:
        return list(self._imports)

    def build(self) -> str:
        head: List[str] = [self._header] if self._header else []
        return assemble("\n".join(head + self._imports), self._blocks)


def assemble(import_block: str, blocks: Sequence[str]) -> str:
    """Join an import block and ordered code blocks into one file body."""
    parts: List[str] = []
    if import_block.strip():
        parts.append(import_block.strip("\n"))
    for block in blocks:
        if block.strip():
            parts.append(block.strip("\n"))
    if not parts:
        return ""
    return "\n\n".join(parts) + "\n"


# ---------------------------------------------------------------------------
# Base generator
# ---------------------------------------------------------------------------


class BaseGenerator(abc.ABC):
    """Common state for one (model, features) pair."""

    artifact_kind: str = ""

    def __init__(self, model: ParsedModel, features: FeatureResolution) -> None:
        if features.model_name != model.name:
            raise ValueError(
                f"FeatureResolution for '{features.model_name}' handed to "
                f"generator for '{model.name}'."
            )
        self.model: ParsedModel = model
        self.features: FeatureResolution = features

        # Naming
        self.model_name: str = model.name
        self.model_lower: str = model.name.lower()
        self.model_camel: str = lower_first(model.name)
        self.model_plural: str = to_plural(model.name)
        self.model_kebab: str = to_kebab_case(model.name)

        # Identifier
        self.id_type: IdType = features.id_type
        self.id_field: str = features.id_field
        self.id_ts_type: str = _ID_TS_TYPES[features.id_type]

        self.strategy: FrameworkStrategy = features.strategy
        self.alias: str = features.import_alias

    @classmethod
    def from_config(
        cls, model: ParsedModel, config: GenerationConfig
    ) -> "BaseGenerator":
        """Build a generator, resolving features for *model* on the spot."""
        return cls(model, resolve_features(model, config))

    # -- Helpers ------------------------------------------------------------

    def module_path(self, kind: str) -> str:
        """Aliased import path of this model's *kind* directory."""
        return f"{self.alias}/{kind}/{self.model_lower}"

    def file_name(self, kind: str, extension: str = "ts") -> str:
        return f"{self.model_lower}.{kind}.{extension}"

    def build_output(
        self,
        files: Dict[str, str],
        imports: Sequence[str],
        exports: Sequence[str],
    ) -> GeneratorOutput:
        metadata = OutputMetadata(
            file_count=len(files),
            line_count=sum(count_lines(text) for text in files.values()),
        )
        logger.debug(
            "%s generator for %s: %d files, %d lines",
            self.artifact_kind or type(self).__name__,
            self.model_name,
            metadata.file_count,
            metadata.line_count,
        )
        return GeneratorOutput(
            files=dict(files),
            imports=_dedupe(imports),
            exports=_dedupe(exports),
            metadata=metadata,
        )

    @abc.abstractmethod
    def generate(self) -> GeneratorOutput:
        """Produce every artifact of this kind for the model."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.model_name} ({self.features.framework})>"


def _dedupe(items: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)


__all__ = [
    "GENERATED_HEADER",
    "TemplateBuilder",
    "assemble",
    "BaseGenerator",
]

logger.debug("crudforge.generators.base loaded")
