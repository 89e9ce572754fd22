# File: crudforge/pipeline.py
"""
crudforge - Generation Pipeline (Orchestrator)
================================================

Connects every phase together:

    Model Document → ParsedModel list → Generators (per model) → Export

Workflow::

    1. Load the model document from a JSON/YAML file.
    2. Parse it into ``ParsedModel`` objects and a ``GenerationConfig``.
    3. For each model, resolve features once and run every generator
       against that single resolution.
    4. Lay the outputs out as ``<kind>/<lower>/<file>`` plus one
       ``index.ts`` barrel per directory.
    5. Hand the file map to ``ProjectExporter``.
    6. Return a ``GenerationReport`` with metrics and status.

Error handling:
    - Loader and parse failures surface as ``FileNotFoundError`` /
      ``ValueError`` and end the run.
    - A ``GenerationError`` aborts only the model that raised it; that
      model contributes no files and its siblings still generate.
    - Export errors are recorded on the report.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from crudforge.errors import GenerationError
from crudforge.exporters import ExportManifest, ExportResult, ProjectExporter
from crudforge.features import FeatureResolution, resolve_features
from crudforge.generators import GENERATORS, BARREL_FILE, build_barrel, collect_exports
from crudforge.models import GenerationConfig, GeneratorOutput, ParsedModel
from crudforge.utils import Timer, count_lines

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("crudforge.pipeline")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``CodeGenerator.generate_from_file()``.

    Contains timing information, file counts and every error or skipped
    model encountered along the way.
    """

    success: bool = False
    framework: str = ""
    output_directory: str = ""
    dry_run: bool = False

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    total_models_processed: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    model_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)
    generated_models: List[str] = field(default_factory=list)
    skipped_models: List[str] = field(default_factory=list)
    exported_symbols: Dict[str, List[str]] = field(default_factory=dict)

    # Export manifest reference
    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "SUCCESS" if self.success else "FAILED"
        if self.dry_run:
            status += " (dry run)"
        lines.append("═" * 60)
        lines.append("  crudforge - Generation Report")
        lines.append("═" * 60)
        lines.append(f"  Status:           {status}")
        lines.append(f"  Framework:        {self.framework}")
        lines.append(f"  Output:           {self.output_directory}")
        lines.append(f"  Models processed: {self.total_models_processed}")
        lines.append(f"  Files generated:  {self.total_files}")
        lines.append(
            f"  Exported symbols: {sum(len(s) for s in self.exported_symbols.values())}"
        )
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append("─" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  "
                    f"{step.detail}"
                )

        for title, entries, icon in (
            ("Input Errors", self.input_errors, "✗"),
            ("Model Errors", self.model_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
            ("Skipped Models", self.skipped_models, "⊘"),
        ):
            if not entries:
                continue
            lines.append("─" * 60)
            lines.append(f"  {title} ({len(entries)}):")
            for entry in entries:
                lines.append(f"    {icon} {entry}")

        lines.append("═" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Model document loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_model_file(path: Path) -> Dict[str, Any]:
    """
    Load a model document (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Model path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s', trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def parse_raw_document(
    raw: Dict[str, Any],
) -> Tuple[List[ParsedModel], GenerationConfig]:
    """
    Validate a raw document into models and configuration.

    Expected top-level keys:
        - "models": list of model mappings (required)
        - "config": generation settings (optional)

    Raises:
        ValueError: If keys are missing, a model name repeats, or pydantic
            validation fails.
    """
    models_data: Any = raw.get("models")
    if not isinstance(models_data, list) or not models_data:
        raise ValueError(
            "Expected a non-empty 'models' list at the top level of the input."
        )

    config_data: Any = raw.get("config")
    if config_data is None:
        logger.info("No generation config found in input, using defaults.")
        config_data = {}
    if not isinstance(config_data, dict):
        raise ValueError(
            f"'config' must be a mapping, got {type(config_data).__name__}."
        )

    models: List[ParsedModel] = []
    seen: Dict[str, int] = {}
    for index, entry in enumerate(models_data):
        try:
            model: ParsedModel = ParsedModel.model_validate(entry)
        except PydanticValidationError as exc:
            label: str = (
                entry.get("name", f"#{index}") if isinstance(entry, dict) else f"#{index}"
            )
            raise ValueError(f"Model {label} failed validation: {exc}") from exc
        # Output directories are keyed by the lower-cased name.
        key: str = model.name.lower()
        if key in seen:
            raise ValueError(
                f"Duplicate model name '{model.name}' "
                f"(entries #{seen[key]} and #{index})."
            )
        seen[key] = index
        models.append(model)

    try:
        config: GenerationConfig = GenerationConfig.model_validate(config_data)
    except PydanticValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return models, config


# ---------------------------------------------------------------------------
# CodeGenerator - orchestrator
# ---------------------------------------------------------------------------


class CodeGenerator:
    """
    Runs every artifact generator for a set of models.

    Usage::

        generator = CodeGenerator()

        # In memory
        files, errors = generator.generate(models, config)

        # From a file, written to disk
        report = generator.generate_from_file(
            Path("models.yaml"), Path("./out")
        )
        print(report.summary())

    The generator keeps no state between calls.
    """

    def __init__(self, *, clean_output: bool = False) -> None:
        self._clean_output: bool = clean_output
        logger.debug("CodeGenerator initialised: clean=%s.", clean_output)

    # -----------------------------------------------------------------
    # Public: one model
    # -----------------------------------------------------------------

    def generate_model(
        self, model: ParsedModel, config: GenerationConfig
    ) -> Dict[str, str]:
        """
        Every file for *model*, keyed by path relative to the output root.

        Raises:
            GenerationError: Nothing is returned for the model in that case.
        """
        files, _ = self._render_model(model, config)
        return files

    # -----------------------------------------------------------------
    # Public: many models
    # -----------------------------------------------------------------

    def generate(
        self,
        models: Sequence[ParsedModel],
        config: GenerationConfig,
    ) -> Tuple[Dict[str, str], List[GenerationError]]:
        """
        Generate every model; a model that raises is left out of the map.

        Returns:
            Tuple of (file map, errors of the skipped models).
        """
        files, errors, _ = self._render_all(models, config)
        return files, errors

    # -----------------------------------------------------------------
    # Internal: rendering
    # -----------------------------------------------------------------

    def _render_model(
        self, model: ParsedModel, config: GenerationConfig
    ) -> Tuple[Dict[str, str], List[str]]:
        """Files for *model* plus the top-level symbols its artifacts export."""
        features: FeatureResolution = resolve_features(model, config)
        model_lower: str = model.name.lower()

        files: Dict[str, str] = {}
        outputs: List[GeneratorOutput] = []
        for kind, generator_cls in GENERATORS.items():
            try:
                output: GeneratorOutput = generator_cls(model, features).generate()
            except GenerationError as exc:
                if exc.model_name is None:
                    exc.model_name = model.name
                raise

            directory: str = f"{kind}/{model_lower}"
            names: List[str] = list(output.files)
            for name in names:
                files[f"{directory}/{name}"] = output.files[name]
            files[f"{directory}/{BARREL_FILE}"] = build_barrel(names)
            outputs.append(output)

        logger.info(
            "Generated %s (%s): %d files.", model.name, features.framework, len(files)
        )
        return files, collect_exports(outputs)

    def _render_all(
        self,
        models: Sequence[ParsedModel],
        config: GenerationConfig,
    ) -> Tuple[Dict[str, str], List[GenerationError], Dict[str, List[str]]]:
        files: Dict[str, str] = {}
        errors: List[GenerationError] = []
        symbols: Dict[str, List[str]] = {}
        for model in models:
            try:
                model_files, model_symbols = self._render_model(model, config)
            except GenerationError as exc:
                if exc.model_name is None:
                    exc.model_name = model.name
                errors.append(exc)
                logger.error("Skipping model %s: %s", model.name, exc)
                continue
            files.update(model_files)
            symbols[model.name] = model_symbols
        return files, errors, symbols

    # -----------------------------------------------------------------
    # Public: full pipeline from a file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        model_path: Path,
        output_dir: Path,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
        dry_run: bool = False,
    ) -> GenerationReport:
        """
        Load, generate and (unless *dry_run*) export.

        Args:
            model_path: JSON/YAML model document.
            output_dir: Root directory of the generated tree.
            config_overrides: Values merged over the document's ``config``.
            dry_run: Generate in memory only; nothing is written.
        """
        report: GenerationReport = GenerationReport(
            output_directory=str(Path(output_dir).resolve()),
            dry_run=dry_run,
        )
        elapsed: float = 0.0

        # Step 1: Load file
        with Timer("load_models") as t_load:
            try:
                raw_data: Dict[str, Any] = load_model_file(Path(model_path))
            except (FileNotFoundError, ValueError) as exc:
                load_error: Optional[str] = str(exc)
            else:
                load_error = None
        elapsed += t_load.elapsed
        if load_error is not None:
            return self._fail_input(report, "Load Model File", t_load, load_error, elapsed)
        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Model File",
            success=True,
            elapsed_seconds=t_load.elapsed,
            detail=f"from {Path(model_path).name}",
        ))

        # Step 2: Parse
        with Timer("parse_models") as t_parse:
            try:
                if config_overrides:
                    base_config: Any = raw_data.get("config") or {}
                    if not isinstance(base_config, dict):
                        raise ValueError(
                            f"'config' must be a mapping, got {type(base_config).__name__}."
                        )
                    merged: Dict[str, Any] = dict(base_config)
                    merged.update(config_overrides)
                    raw_data = {**raw_data, "config": merged}
                models, config = parse_raw_document(raw_data)
            except ValueError as exc:
                parse_error: Optional[str] = str(exc)
            else:
                parse_error = None
        elapsed += t_parse.elapsed
        if parse_error is not None:
            return self._fail_input(report, "Parse Models", t_parse, parse_error, elapsed)

        report.framework = config.framework
        report.step_metrics.append(GenerationStepMetric(
            step_name="Parse Models",
            success=True,
            elapsed_seconds=t_parse.elapsed,
            detail=f"{len(models)} models parsed",
        ))
        logger.info(
            "Parsed %d models, framework: %s.", len(models), config.framework
        )

        # Step 3: Generate
        files: Dict[str, str] = self._step_generate(models, config, report)
        elapsed += report.step_metrics[-1].elapsed_seconds

        # Step 4: Export
        if dry_run:
            report.total_files = len(files)
            report.total_lines = sum(count_lines(c) for c in files.values())
            report.total_bytes = sum(len(c.encode("utf-8")) for c in files.values())
            logger.info("Dry run: %d files not written.", len(files))
        elif files:
            self._step_export(files, config, Path(output_dir), report)
            elapsed += report.step_metrics[-1].elapsed_seconds

        return self._finalise_report(report, elapsed)

    # -----------------------------------------------------------------
    # Pipeline step: code generation
    # -----------------------------------------------------------------

    def _step_generate(
        self,
        models: Sequence[ParsedModel],
        config: GenerationConfig,
        report: GenerationReport,
    ) -> Dict[str, str]:
        with Timer("code_generation") as t:
            files, errors, symbols = self._render_all(models, config)

        report.exported_symbols.update(symbols)
        failed = {exc.model_name for exc in errors}
        report.model_errors.extend(str(exc) for exc in errors)
        report.skipped_models.extend(m.name for m in models if m.name in failed)
        report.generated_models.extend(m.name for m in models if m.name not in failed)
        report.total_models_processed = len(models)

        total_lines: int = sum(count_lines(content) for content in files.values())
        detail: str = (
            f"{len(files)} files, ~{total_lines:,} lines, "
            f"{len(report.generated_models)}/{len(models)} models"
        )
        report.step_metrics.append(GenerationStepMetric(
            step_name="Code Generation",
            success=not errors,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))
        logger.info("Code generation complete: %s in %.3fs.", detail, t.elapsed)
        return files

    # -----------------------------------------------------------------
    # Pipeline step: export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        files: Dict[str, str],
        config: GenerationConfig,
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            exporter: ProjectExporter = ProjectExporter(
                output_dir,
                framework=config.framework,
                clean_before_export=self._clean_output,
            )
            result: ExportResult = exporter.export(files, report.generated_models)

        report.total_files = result.manifest.total_files
        report.total_bytes = result.manifest.total_bytes
        report.total_lines = result.manifest.total_lines
        report.export_errors.extend(result.errors)
        report.manifest = result.manifest

        report.step_metrics.append(GenerationStepMetric(
            step_name="Export to Filesystem",
            success=result.success,
            elapsed_seconds=t.elapsed,
            detail=(
                f"{result.manifest.total_files} files, "
                f"{result.manifest.total_bytes:,} bytes"
            ),
        ))

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _fail_input(
        self,
        report: GenerationReport,
        step_name: str,
        timer: Timer,
        message: str,
        elapsed: float,
    ) -> GenerationReport:
        logger.error("%s failed: %s", step_name, message)
        report.input_errors.append(message)
        report.step_metrics.append(GenerationStepMetric(
            step_name=step_name,
            success=False,
            elapsed_seconds=timer.elapsed,
            detail=message.splitlines()[0] if message else "",
        ))
        return self._finalise_report(report, elapsed)

    @staticmethod
    def _finalise_report(report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors or report.model_errors or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "CodeGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_model_file",
    "parse_raw_document",
]

logger.debug("crudforge.pipeline loaded.")
