#!/usr/bin/env python3
"""
Top-level command for exporting a PHP source tree to JSON.

Discovers the PHP files of a source tree, reflects each one and writes the
list of exported file records to a JSON file, together with a run report.

Usage:
    python run_parser.py --source-dir /path/to/wordpress
    python run_parser.py --source-dir ./src --ignore "wp-content/plugins,vendor" --output-file out/wp.json
    python run_parser.py --source-dir ./releases --use-versions
    python run_parser.py --config export.yml
"""

import argparse
import logging
import sys
import time
from dataclasses import replace

from core.run_artifacts import write_export_error, write_export_json, write_run_report
from core.run_config import (
    DEFAULT_OUTPUT_FILE,
    DEFAULT_REPORT_DIR,
    DEPRECATION_POLICIES,
    ConfigValidationError,
    RunConfig,
    apply_env_overrides,
    load_run_config,
    split_patterns,
)
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from exporter.discovery import DiscoveryError, get_files
from exporter.pipeline import ExportStats, parse_files
from exporter.uses import DeprecationPolicy

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="PHP Source Reflection & JSON Export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_parser.py --source-dir ./wordpress\n"
            "  python run_parser.py --source-dir ./releases --use-versions\n"
        )
    )

    parser.add_argument(
        "--config",
        default=None,
        help="YAML or JSON run config. Command-line flags override its values."
    )
    parser.add_argument(
        "--source-dir",
        default=None,
        help="Directory to search for PHP files."
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Directory exported paths are relative to. Default: --source-dir."
    )
    parser.add_argument(
        "--ignore",
        default=None,
        help="Comma-separated regex patterns of paths to skip."
    )
    parser.add_argument(
        "--include",
        default=None,
        help="Comma-separated regex patterns; only matching paths are exported."
    )
    parser.add_argument(
        "--use-versions",
        action="store_true",
        default=None,
        help="Treat the first directory under the root as a version name."
    )
    parser.add_argument(
        "--output-file",
        default=None,
        help=f"Path of the JSON export. Default: {DEFAULT_OUTPUT_FILE}"
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help=f"Directory for run reports. Default: {DEFAULT_REPORT_DIR}"
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=False,
        help="Abort on the first file that fails to export."
    )
    parser.add_argument(
        "--deprecation-policy",
        choices=DEPRECATION_POLICIES,
        default=None,
        help="Which call receives deprecation_version. Default: first_call."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level. Default: INFO"
    )

    return parser.parse_args(argv)


def build_run_config(args: argparse.Namespace) -> RunConfig:
    """Merge the config file, environment and command-line flags.

    Raises:
        ConfigValidationError: If no source directory is configured or a
            value is invalid.
    """
    if args.config:
        config = load_run_config(args.config)
    else:
        if not args.source_dir:
            raise ConfigValidationError("--source-dir or --config is required")
        config = RunConfig(source_dir=args.source_dir)

    config = apply_env_overrides(config)

    overrides = {}
    if args.source_dir:
        overrides["source_dir"] = args.source_dir
    if args.root:
        overrides["root"] = args.root
    if args.ignore is not None:
        overrides["ignore_patterns"] = split_patterns(args.ignore)
    if args.include is not None:
        overrides["include_patterns"] = split_patterns(args.include)
    if args.use_versions:
        overrides["use_versions"] = True
    if args.output_file:
        overrides["output_file"] = args.output_file
    if args.report_dir:
        overrides["report_dir"] = args.report_dir
    if args.fail_fast:
        overrides["continue_on_error"] = False
    if args.deprecation_policy:
        overrides["deprecation_policy"] = args.deprecation_policy

    return replace(config, **overrides)


def run_export(config: RunConfig, run_id: str) -> int:
    """Run discovery and export for one config.

    Returns:
        Process exit status: 0 on success, 1 on discovery failure or when
        a file failed under fail-fast.
    """
    report = {
        "source_dir": config.source_dir,
        "root": config.effective_root,
        "use_versions": config.use_versions,
        "output_file": config.output_file,
    }

    with phase_scope("discover"):
        try:
            files = get_files(
                config.source_dir,
                ignore=config.ignore_patterns,
                include=config.include_patterns,
            )
        except DiscoveryError as e:
            logger.error(f"Discovery failed: {e}")
            write_export_error(e.to_dict(), config.output_file)
            report.update({"status": "failed", "error": e.to_dict()})
            path = write_run_report(report, run_id, config.report_dir)
            logger.info(f"Run report written to {path}")
            return 1
        except ValueError as e:
            logger.error(f"Invalid discovery pattern: {e}")
            return 1

    stats = ExportStats()
    with phase_scope("export"):
        t0 = time.time()
        try:
            records = parse_files(
                files,
                config.effective_root,
                config.use_versions,
                deprecation_policy=DeprecationPolicy(config.deprecation_policy),
                continue_on_error=config.continue_on_error,
                stats=stats,
            )
        except Exception as e:
            logger.error(f"Export aborted: {e}")
            report.update({"status": "failed", "stats": stats.to_dict(), "error": str(e)})
            write_run_report(report, run_id, config.report_dir)
            return 1
        elapsed = time.time() - t0

    with phase_scope("write"):
        written = write_export_json(records, config.output_file)
        logger.info(f"Wrote {written} file records to {config.output_file} in {elapsed:.2f}s")

    status = "success" if stats.files_failed == 0 else "partial"
    report.update({"status": status, "stats": stats.to_dict(), "duration_seconds": elapsed})
    path = write_run_report(report, run_id, config.report_dir)
    logger.info(f"Run report written to {path}")
    return 0


def main(argv=None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    configure_structured_logging(getattr(logging, args.log_level))
    run_id = set_run_id()

    try:
        with phase_scope("config"):
            config = build_run_config(args)
    except ConfigValidationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info(f"Source directory : {config.source_dir}")
    logger.info(f"Export root      : {config.effective_root}")
    logger.info(f"Output file      : {config.output_file}")

    sys.exit(run_export(config, run_id))


if __name__ == "__main__":
    main()
