"""Core shared contracts and utilities."""

from core.path_contract import (
    EXPORT_PATH_SEPARATOR,
    NormalizedPath,
    get_version,
    normalize_file_path,
    qualify_php_name,
    relative_path,
    to_export_path,
)
from core.structured_logging import (
    configure_structured_logging,
    file_scope,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.run_config import (
    ConfigValidationError,
    RunConfig,
    apply_env_overrides,
    load_run_config,
    parse_run_config,
)
from core.run_artifacts import write_export_error, write_export_json, write_run_report

__all__ = [
    "EXPORT_PATH_SEPARATOR",
    "NormalizedPath",
    "get_version",
    "normalize_file_path",
    "qualify_php_name",
    "relative_path",
    "to_export_path",
    "configure_structured_logging",
    "file_scope",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "RunConfig",
    "apply_env_overrides",
    "load_run_config",
    "parse_run_config",
    "write_export_error",
    "write_export_json",
    "write_run_report",
]
