"""Run configuration for the export pipeline.

A run is described by a YAML (or JSON) file, optionally overridden by
``PHPDOC_EXPORT_*`` environment variables. Environment variables are read
after loading a ``.env`` file via python-dotenv.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "PHPDOC_EXPORT_"
DEFAULT_OUTPUT_FILE = "output/phpdoc.json"
DEFAULT_REPORT_DIR = "output/run_reports"
DEPRECATION_POLICIES = ("first_call", "matching_call")


class ConfigValidationError(RuntimeError):
    """Raised when a run configuration is invalid."""


@dataclass(frozen=True)
class RunConfig:
    """Validated settings for one export run."""

    source_dir: str
    root: str | None = None
    ignore_patterns: list[str] = field(default_factory=list)
    include_patterns: list[str] = field(default_factory=list)
    use_versions: bool = False
    output_file: str = DEFAULT_OUTPUT_FILE
    report_dir: str = DEFAULT_REPORT_DIR
    continue_on_error: bool = True
    deprecation_policy: str = "first_call"

    @property
    def effective_root(self) -> str:
        """Root used for relative paths; defaults to the source directory."""
        return os.path.abspath(self.root or self.source_dir)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def split_patterns(raw: Any) -> list[str]:
    """Normalize a pattern list given as a list or a comma-separated string."""
    if raw is None:
        return []
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = [str(item) for item in raw]
    else:
        raise ConfigValidationError(
            f"Pattern list must be a string or list, got {type(raw).__name__}"
        )
    return [item.strip() for item in items if item.strip()]


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ConfigValidationError(f"{ctx} must be an object")
    return payload


def _load_config_payload(path: str) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigValidationError(f"Config file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() == ".json":
            payload = json.loads(text)
        else:
            payload = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigValidationError(
            f"Failed to parse config file {config_path}: {exc}"
        ) from exc

    if payload is None:
        raise ConfigValidationError(f"Config file is empty: {config_path}")
    return _expect_dict(payload, "config")


def parse_run_config(payload: dict[str, Any]) -> RunConfig:
    """Validate a raw config mapping into a RunConfig."""
    source_dir = str(payload.get("source_dir", "") or "").strip()
    if not source_dir:
        raise ConfigValidationError("source_dir is required")

    policy = str(payload.get("deprecation_policy", "first_call")).strip().lower()
    if policy not in DEPRECATION_POLICIES:
        raise ConfigValidationError(
            f"deprecation_policy must be one of {', '.join(DEPRECATION_POLICIES)}, "
            f"got '{policy}'"
        )

    root = payload.get("root")
    return RunConfig(
        source_dir=source_dir,
        root=str(root).strip() if root else None,
        ignore_patterns=split_patterns(payload.get("ignore")),
        include_patterns=split_patterns(payload.get("include")),
        use_versions=bool(payload.get("use_versions", False)),
        output_file=str(payload.get("output_file", DEFAULT_OUTPUT_FILE)),
        report_dir=str(payload.get("report_dir", DEFAULT_REPORT_DIR)),
        continue_on_error=bool(payload.get("continue_on_error", True)),
        deprecation_policy=policy,
    )


def load_run_config(path: str) -> RunConfig:
    """Load and validate a run config from a YAML/JSON file."""
    payload = _load_config_payload(path)
    config = parse_run_config(payload)
    logger.info("Loaded run config from %s", path)
    return config


def apply_env_overrides(config: RunConfig, load_env_file: bool = True) -> RunConfig:
    """Override config fields from ``PHPDOC_EXPORT_*`` environment variables.

    Recognized variables: ``SOURCE_DIR``, ``ROOT``, ``IGNORE``, ``INCLUDE``,
    ``OUTPUT_FILE``, ``REPORT_DIR``, ``USE_VERSIONS``, ``CONTINUE_ON_ERROR``,
    ``DEPRECATION_POLICY`` (each with the prefix).
    """
    if load_env_file:
        load_dotenv()

    overrides: dict[str, Any] = {}
    for key in ("source_dir", "root", "output_file", "report_dir"):
        value = os.getenv(ENV_PREFIX + key.upper())
        if value:
            overrides[key] = value.strip()

    for key, attr in (("ignore", "ignore_patterns"), ("include", "include_patterns")):
        value = os.getenv(ENV_PREFIX + key.upper())
        if value is not None:
            overrides[attr] = split_patterns(value)

    if os.getenv(ENV_PREFIX + "USE_VERSIONS") is not None:
        overrides["use_versions"] = _env_flag(ENV_PREFIX + "USE_VERSIONS")
    if os.getenv(ENV_PREFIX + "CONTINUE_ON_ERROR") is not None:
        overrides["continue_on_error"] = _env_flag(
            ENV_PREFIX + "CONTINUE_ON_ERROR", default=True
        )

    policy = os.getenv(ENV_PREFIX + "DEPRECATION_POLICY")
    if policy:
        policy = policy.strip().lower()
        if policy not in DEPRECATION_POLICIES:
            raise ConfigValidationError(
                f"{ENV_PREFIX}DEPRECATION_POLICY must be one of "
                f"{', '.join(DEPRECATION_POLICIES)}, got '{policy}'"
            )
        overrides["deprecation_policy"] = policy

    if overrides:
        logger.info("Applying environment overrides: %s", ", ".join(sorted(overrides)))
        return replace(config, **overrides)
    return config
