"""
PHP source file discovery.

Walks a directory tree and returns the PHP files to export, filtered by
case-insensitive include and ignore regular expressions matched against the
full path.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Pattern, Sequence, Union

from core.run_config import split_patterns
from reflection.config import PHP_EXTENSION

logger = logging.getLogger(__name__)

PatternList = Union[str, Sequence[str], None]


class DiscoveryError(RuntimeError):
    """Raised when a directory in the tree cannot be traversed.

    Attributes:
        directory: The root directory discovery was asked to walk.
        path: The directory that failed, when known.
    """

    code = "unexpected_value_exception"

    def __init__(self, directory: str, path: Optional[str] = None, reason: str = ""):
        self.directory = directory
        self.path = path or directory
        self.reason = reason
        message = f"Directory [{directory}] contained a directory we can not recurse into"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Structured error result emitted instead of a file list."""
        return {
            "code": self.code,
            "message": str(self),
            "directory": self.directory,
            "path": self.path,
        }


def _compile_patterns(patterns: PatternList) -> List[Pattern]:
    compiled = []
    for pattern in split_patterns(patterns):
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            raise ValueError(f"Invalid file pattern '{pattern}': {exc}") from exc
    return compiled


def get_files(
    directory: str,
    ignore: PatternList = None,
    include: PatternList = None,
) -> List[str]:
    """Recursively discover the PHP files under ``directory``.

    Args:
        directory: Root directory to search.
        ignore: Regex patterns (list or comma-separated string); a file
            matching any of them is skipped.
        include: Regex patterns; when given, a file must match at least one.

    Returns:
        Sorted list of file paths.

    Raises:
        DiscoveryError: If ``directory`` or any directory below it cannot be
            read. No partial list is returned.
        ValueError: If a pattern is not a valid regular expression.

    Example:
        >>> files = get_files("/path/to/wordpress", ignore="wp-content/plugins")
    """
    directory = os.path.abspath(directory)
    ignore_patterns = _compile_patterns(ignore)
    include_patterns = _compile_patterns(include)

    logger.info(f"Discovering PHP files in {directory}")

    def _on_error(exc: OSError) -> None:
        raise DiscoveryError(directory, getattr(exc, "filename", None), str(exc)) from exc

    if not os.path.isdir(directory):
        raise DiscoveryError(directory, reason="not a directory")

    php_files = []
    for root, dirs, files in os.walk(directory, onerror=_on_error):
        dirs.sort()
        for name in files:
            if os.path.splitext(name)[1] != f".{PHP_EXTENSION}":
                continue

            path = os.path.join(root, name)
            if include_patterns and not any(p.search(path) for p in include_patterns):
                continue
            if any(p.search(path) for p in ignore_patterns):
                logger.debug(f"Ignoring {path}")
                continue

            php_files.append(path)

    logger.info(f"Found {len(php_files)} PHP files")
    return sorted(php_files)
