# File: crudforge/generators/barrel.py
"""
crudforge - Barrel Aggregation
================================
``index.ts`` re-export files for a model's artifact directories, plus the
concatenation of generator export lists.  No business logic lives here.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from crudforge.generators.base import TemplateBuilder
from crudforge.models import GeneratorOutput

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.generators.barrel")

BARREL_FILE: str = "index.ts"


def build_barrel(file_names: Iterable[str]) -> str:
    """``export * from './x.js'`` for every TypeScript file, in the given order."""
    lines: List[str] = []
    for name in file_names:
        if not name.endswith(".ts") or name == BARREL_FILE:
            continue
        lines.append(f"export * from './{name[:-3]}.js'")
    builder = TemplateBuilder()
    builder.block("\n".join(lines))
    return builder.build()


def collect_exports(outputs: Iterable[GeneratorOutput]) -> List[str]:
    """Top-level export symbols of *outputs*, concatenated in order."""
    symbols: List[str] = []
    for output in outputs:
        symbols.extend(sym for sym in output.exports if "." not in sym)
    return symbols


__all__ = ["BARREL_FILE", "build_barrel", "collect_exports"]

logger.debug("crudforge.generators.barrel loaded")
