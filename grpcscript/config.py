"""
Settings file loader.

An optional grpcscript.yaml provides defaults for the CLI:

    proto_path: ./protos
    import_paths:
      - ./third_party
    report_dir: reports
    save_reports: true
    log_level: INFO

Command-line options always take precedence over the file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .document.validation import ValidationResult

DEFAULT_CONFIG_FILE = "grpcscript.yaml"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Defaults applied to CLI commands."""
    proto_path: str | None = None
    import_paths: list[str] = field(default_factory=list)
    report_dir: str = "reports"
    save_reports: bool = True
    log_level: str = "WARNING"


class SettingsValidator:
    """Validates raw parsed YAML against the settings schema."""

    KNOWN_KEYS = {"proto_path", "import_paths", "report_dir", "save_reports", "log_level"}

    def __init__(self, data: dict[str, Any]):
        self.data = data
        self.result = ValidationResult()

    def validate(self) -> ValidationResult:
        for key in sorted(set(self.data) - self.KNOWN_KEYS):
            self.result.add_error(
                key,
                f"Unknown setting '{key}'",
                suggestion=f"Valid settings are: {', '.join(sorted(self.KNOWN_KEYS))}"
            )

        for key in ("proto_path", "report_dir"):
            value = self.data.get(key)
            if value is not None and not isinstance(value, str):
                self.result.add_error(key, "Must be a string", value=value)

        import_paths = self.data.get("import_paths")
        if import_paths is not None:
            if not isinstance(import_paths, list) or not all(isinstance(p, str) for p in import_paths):
                self.result.add_error(
                    "import_paths",
                    "Must be a list of strings",
                    value=import_paths
                )

        save_reports = self.data.get("save_reports")
        if save_reports is not None and not isinstance(save_reports, bool):
            self.result.add_error("save_reports", "Must be true or false", value=save_reports)

        log_level = self.data.get("log_level")
        if log_level is not None and (
            not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS
        ):
            self.result.add_error(
                "log_level",
                "Invalid log level",
                value=log_level,
                suggestion=f"Valid levels: {', '.join(LOG_LEVELS)}"
            )

        return self.result


def parse_settings(data: dict[str, Any], base_dir: Path | None = None) -> Settings:
    """Convert validated data to Settings, resolving paths against base_dir."""
    def resolve(value: str) -> str:
        path = Path(value)
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return str(path)

    settings = Settings()
    if data.get("proto_path") is not None:
        settings.proto_path = resolve(data["proto_path"])
    settings.import_paths = [resolve(p) for p in data.get("import_paths") or []]
    if data.get("report_dir") is not None:
        settings.report_dir = resolve(data["report_dir"])
    if data.get("save_reports") is not None:
        settings.save_reports = data["save_reports"]
    if data.get("log_level") is not None:
        settings.log_level = data["log_level"].upper()
    return settings


def load_settings(path: str | Path | None = None) -> tuple[Settings | None, ValidationResult]:
    """
    Load and validate settings from a YAML file.

    Args:
        path: Settings file; when None, ./grpcscript.yaml is used if present

    Returns:
        Tuple of (Settings or None, ValidationResult)
        A missing default file yields default Settings.
    """
    if path is None:
        path = Path(DEFAULT_CONFIG_FILE)
        if not path.exists():
            return Settings(), ValidationResult()
    path = Path(path)

    if not path.exists():
        result = ValidationResult()
        result.add_error(
            str(path),
            "File not found",
            suggestion="Check the file path is correct"
        )
        return None, result

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        result = ValidationResult()
        result.add_error(
            str(path),
            f"Invalid YAML syntax: {e}",
            suggestion="Check YAML formatting (indentation, colons, etc.)"
        )
        return None, result

    if data is None:
        return Settings(), ValidationResult()

    if not isinstance(data, dict):
        result = ValidationResult()
        result.add_error(
            str(path),
            "File must contain a YAML object (not a list or scalar)",
            value=type(data).__name__
        )
        return None, result

    result = SettingsValidator(data).validate()
    if not result.is_valid:
        return None, result

    return parse_settings(data, path.parent), result
