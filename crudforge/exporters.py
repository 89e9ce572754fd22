# File: crudforge/exporters.py
"""
crudforge - Project Exporter
==============================

Writes a generated file map to disk:
    1. Optionally cleans the output directory first.
    2. Writes every file atomically (temp file in the same directory,
       then ``os.replace``).
    3. Records size, line count and sha256 of each file.
    4. Writes ``crudforge-manifest.json`` next to the generated tree.

A failed write is recorded on the result and the remaining files are still
attempted; files already written are left in place.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from crudforge.utils import Timer, clean_directory, count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.exporters")

MANIFEST_FILE: str = "crudforge-manifest.json"


# ---------------------------------------------------------------------------
# Export records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """One exported file."""

    relative_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """
    Every file written by one export run.

    Apart from ``export_timestamp`` the manifest depends only on the file
    map, so two exports of the same input produce the same checksums.
    """

    generator_version: str = ""
    framework: str = ""
    export_timestamp: str = ""
    models: List[str] = field(default_factory=list)
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "framework": self.framework,
            "export_timestamp": self.export_timestamp,
            "models": list(self.models),
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Returned by ``ProjectExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# ProjectExporter
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated files under *output_dir*.

    Usage::

        exporter = ProjectExporter(Path("./out"), framework="express")
        result = exporter.export(files, models=["Post"])
        print(result.manifest.to_json())

    Not thread-safe; use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        framework: str = "",
        clean_before_export: bool = False,
        atomic_writes: bool = True,
        generate_manifest: bool = True,
    ) -> None:
        self._output_dir: Path = Path(output_dir).resolve()
        self._framework: str = framework
        self._clean_before_export: bool = clean_before_export
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "ProjectExporter initialised: output_dir=%s, atomic=%s.",
            self._output_dir,
            self._atomic_writes,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(
        self,
        generated_files: Dict[str, str],
        models: Sequence[str] = (),
    ) -> ExportResult:
        """
        Write *generated_files* (relative path -> content) to disk.

        Args:
            generated_files: File map produced by the code generator.
            models: Names of the models the files were generated for.

        Returns:
            ExportResult with success flag, manifest and error details.
        """
        self._errors = []
        self._warnings = []
        self._file_records = []

        with Timer("export") as timer:
            try:
                self._pre_export_cleanup()
                self._output_dir.mkdir(parents=True, exist_ok=True)
                self._write_generated_files(generated_files)
                if self._generate_manifest:
                    self._write_manifest_file(models)
            except OSError as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest(models)
        success: bool = len(self._errors) == 0

        result: ExportResult = ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

        if success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )
        return result

    # -----------------------------------------------------------------
    # Internal: directory management
    # -----------------------------------------------------------------

    def _pre_export_cleanup(self) -> None:
        if not self._clean_before_export or not self._output_dir.exists():
            return
        logger.info("Cleaning output directory: %s", self._output_dir)
        try:
            clean_directory(self._output_dir)
        except OSError as exc:
            warning_msg: str = f"Could not clean {self._output_dir}: {exc}"
            self._warnings.append(warning_msg)
            logger.warning(warning_msg)

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_generated_files(self, generated_files: Dict[str, str]) -> None:
        for rel_path in sorted(generated_files):
            try:
                record: FileRecord = self._write_single_file(
                    rel_path, generated_files[rel_path]
                )
                self._file_records.append(record)
            except OSError as exc:
                error_msg: str = (
                    f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
                )
                self._errors.append(error_msg)
                logger.error(error_msg)

        logger.info(
            "Wrote %d generated files to %s.",
            len(self._file_records),
            self._output_dir,
        )

    def _write_single_file(self, rel_path: str, content: str) -> FileRecord:
        full_path: Path = self._output_dir / rel_path
        size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        line_count: int = count_lines(content)

        logger.debug(
            "Wrote file: %s (%d bytes, %d lines).", rel_path, size_bytes, line_count
        )
        return FileRecord(
            relative_path=rel_path,
            size_bytes=size_bytes,
            line_count=line_count,
            sha256=sha256_hex(content),
        )

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self, models: Sequence[str]) -> ExportManifest:
        import crudforge

        records: List[FileRecord] = [
            r for r in self._file_records if r.relative_path != MANIFEST_FILE
        ]
        return ExportManifest(
            generator_version=crudforge.__version__,
            framework=self._framework,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            models=list(models),
            total_files=len(records),
            total_bytes=sum(r.size_bytes for r in records),
            total_lines=sum(r.line_count for r in records),
            files=records,
        )

    def _write_manifest_file(self, models: Sequence[str]) -> None:
        manifest: ExportManifest = self._build_manifest(models)
        try:
            write_file(
                self._output_dir / MANIFEST_FILE,
                manifest.to_json() + "\n",
                atomic=self._atomic_writes,
            )
            logger.debug("Wrote manifest to %s.", self._output_dir / MANIFEST_FILE)
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MANIFEST_FILE",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
]

logger.debug("crudforge.exporters loaded.")
