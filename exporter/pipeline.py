"""
High-level orchestrator for PHP export.

Each file goes through the same single pass: it is reflected, its path is
normalized against the export root (optionally splitting off a version
directory), and its FileRecord is assembled from the declaration exporters.
"""

import logging
import os
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from core.path_contract import normalize_file_path
from core.structured_logging import file_scope
from exporter.declarations import export_classes, export_functions
from exporter.discovery import PatternList, get_files
from exporter.docblock import Formatter, export_docblock
from exporter.records import ConstantRecord, FileRecord, IncludeRecord
from exporter.uses import DeprecationPolicy, export_hooks, export_uses, scope_hooks
from reflection.models import FileReflection
from reflection.reflector import reflect_file

logger = logging.getLogger(__name__)

Reflect = Callable[[str], FileReflection]


class ExportStats:
    """Statistics for an export operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.functions_exported = 0
        self.classes_exported = 0
        self.hooks_exported = 0
        self.parse_errors = 0
        self.failed_files: List[str] = []

    def record_file(self, record: FileRecord, reflection: FileReflection) -> None:
        self.files_processed += 1
        self.functions_exported += len(record["functions"])
        self.classes_exported += len(record["classes"])
        self.hooks_exported += _count_hooks(record)
        self.parse_errors += reflection.parse_error_count

    def record_failure(self, filename: str) -> None:
        self.files_failed += 1
        self.failed_files.append(filename)

    def to_dict(self) -> Dict[str, Union[int, List[str]]]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "functions_exported": self.functions_exported,
            "classes_exported": self.classes_exported,
            "hooks_exported": self.hooks_exported,
            "parse_errors": self.parse_errors,
            "failed_files": list(self.failed_files),
        }

    def __str__(self) -> str:
        return (
            f"ExportStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, functions={self.functions_exported}, "
            f"classes={self.classes_exported}, hooks={self.hooks_exported}, "
            f"parse_errors={self.parse_errors})"
        )


def _count_hooks(record: FileRecord) -> int:
    count = len(record.get("hooks", []))
    for function in record["functions"]:
        count += len(function.get("hooks", []))
    for cls in record["classes"]:
        for method in cls["methods"]:
            count += len(method.get("hooks", []))
    return count


def export_file(
    reflection: FileReflection,
    path: str,
    root: str,
    version: Optional[str] = None,
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
) -> FileRecord:
    """Assemble the FileRecord of one reflected file.

    Args:
        reflection: The reflected file.
        path: Root-relative path with ``/`` separators.
        root: Export root (with the version directory appended, if any).
        version: Version name, or None.
        formatter: Renderer for tag descriptions.
        deprecation_policy: Where ``deprecation_version`` is attached.

    Returns:
        The FileRecord, keys in wire order.
    """
    out: FileRecord = {
        "doc": export_docblock(reflection, formatter),
        "path": path,
        "root": root,
        "version": version,
    }

    if reflection.uses:
        uses = export_uses(reflection.uses, deprecation_policy)
        if uses:
            out["uses"] = uses

    includes: List[IncludeRecord] = [
        {"name": include.name, "line": include.line, "type": include.type}
        for include in reflection.includes
    ]
    if includes:
        out["includes"] = includes

    constants: List[ConstantRecord] = [
        {"name": constant.name, "line": constant.line, "value": constant.value}
        for constant in reflection.constants
    ]
    if constants:
        out["constants"] = constants

    hooks = scope_hooks(reflection.uses)
    if hooks:
        out["hooks"] = export_hooks(hooks, formatter)

    out["functions"] = export_functions(reflection.functions, formatter, deprecation_policy)
    out["classes"] = export_classes(reflection.classes, formatter, deprecation_policy)
    return out


def _export_one(
    filename: str,
    root: str,
    use_versions: bool,
    formatter: Optional[Formatter],
    deprecation_policy: DeprecationPolicy,
    reflect: Reflect,
) -> Tuple[FileRecord, FileReflection]:
    reflection = reflect(filename)
    normalized = normalize_file_path(filename, root, use_versions)
    if use_versions and normalized.version is None:
        logger.warning("No version directory found in %s", normalized.path)

    record = export_file(
        reflection,
        path=normalized.path,
        root=normalized.root,
        version=normalized.version,
        formatter=formatter,
        deprecation_policy=deprecation_policy,
    )
    return record, reflection


def iter_parse_files(
    files: Sequence[str],
    root: str,
    use_versions: bool = False,
    *,
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
    continue_on_error: bool = True,
    reflect: Reflect = reflect_file,
    stats: Optional[ExportStats] = None,
) -> Iterator[FileRecord]:
    """Yield one FileRecord per file, in input order.

    A file that fails to reflect or export is logged, counted in ``stats``
    and skipped, unless ``continue_on_error`` is False, in which case the
    error is re-raised.
    """
    if stats is None:
        stats = ExportStats()

    for filename in files:
        with file_scope(filename):
            try:
                record, reflection = _export_one(
                    filename,
                    root,
                    use_versions,
                    formatter,
                    deprecation_policy,
                    reflect,
                )
            except FileNotFoundError as e:
                logger.error(f"File not found: {e}")
                stats.record_failure(filename)
                if not continue_on_error:
                    raise
                continue
            except ValueError as e:
                logger.error(f"Invalid file: {e}")
                stats.record_failure(filename)
                if not continue_on_error:
                    raise
                continue
            except Exception as e:
                logger.error(f"Unexpected error processing {filename}: {e}", exc_info=True)
                stats.record_failure(filename)
                if not continue_on_error:
                    raise
                continue

            stats.record_file(record, reflection)
            logger.debug(
                "Exported %s: %d functions, %d classes",
                record["path"],
                len(record["functions"]),
                len(record["classes"]),
            )
        yield record


def parse_files(
    files: Sequence[str],
    root: str,
    use_versions: bool = False,
    *,
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
    continue_on_error: bool = True,
    reflect: Reflect = reflect_file,
    stats: Optional[ExportStats] = None,
) -> List[FileRecord]:
    """Export a list of PHP files.

    Args:
        files: Paths of the files to export, in output order.
        root: Directory the exported paths are relative to.
        use_versions: Treat the first directory under ``root`` as a version.
        formatter: Renderer for tag descriptions (identity by default).
        deprecation_policy: Where ``deprecation_version`` is attached.
        continue_on_error: Skip failing files instead of raising.
        reflect: Reflection function, ``reflect_file`` by default.
        stats: Optional ExportStats to fill.

    Returns:
        List of FileRecords ready for JSON serialization.

    Example:
        >>> records = parse_files(get_files("/path/to/wp"), "/path/to/wp")
        >>> records[0]["path"]
        'index.php'
    """
    if stats is None:
        stats = ExportStats()

    logger.info(f"Exporting {len(files)} files relative to {root}")
    records = list(
        iter_parse_files(
            files,
            root,
            use_versions,
            formatter=formatter,
            deprecation_policy=deprecation_policy,
            continue_on_error=continue_on_error,
            reflect=reflect,
            stats=stats,
        )
    )
    logger.info(f"Export complete: {stats}")
    return records


def export_directory(
    directory: str,
    root: Optional[str] = None,
    ignore: PatternList = None,
    include: PatternList = None,
    use_versions: bool = False,
    *,
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
    continue_on_error: bool = True,
) -> Tuple[List[FileRecord], ExportStats]:
    """Discover and export every PHP file under ``directory``.

    Args:
        directory: Root directory to process.
        root: Root for relative paths. If None, uses ``directory``.
        ignore: Ignore patterns for discovery.
        include: Include patterns for discovery.
        use_versions: Treat the first directory under ``root`` as a version.

    Returns:
        A tuple of (records, stats).

    Raises:
        DiscoveryError: If the directory tree cannot be traversed.
    """
    directory = os.path.abspath(directory)
    root = os.path.abspath(root) if root else directory

    files = get_files(directory, ignore=ignore, include=include)
    if not files:
        logger.warning(f"No PHP files found in {directory}")

    stats = ExportStats()
    records = parse_files(
        files,
        root,
        use_versions,
        formatter=formatter,
        deprecation_policy=deprecation_policy,
        continue_on_error=continue_on_error,
        stats=stats,
    )
    return records, stats
