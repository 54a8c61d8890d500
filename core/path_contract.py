"""Path and name contract shared by the reflection and export layers.

Exported paths are root-relative and always use ``/`` separators, whatever
the host convention. PHP names are canonicalized here so that reflection
and export agree on how ``extends``/``implements`` references look.
"""

from __future__ import annotations

import ntpath
import os
import re
from typing import NamedTuple

EXPORT_PATH_SEPARATOR = "/"
PHP_NAMESPACE_SEPARATOR = "\\"

_VERSION_SEGMENT_RE = re.compile(r"^/?([^/]+)/")
_WHITESPACE_RE = re.compile(r"\s+")


class NormalizedPath(NamedTuple):
    """Root-relative path with the optional version segment split off."""

    path: str
    root: str
    version: str | None


def to_export_path(path: str) -> str:
    """Convert host separators to ``/``."""
    path = path.replace(os.sep, EXPORT_PATH_SEPARATOR)
    if os.altsep:
        path = path.replace(os.altsep, EXPORT_PATH_SEPARATOR)
    return path.replace(ntpath.sep, EXPORT_PATH_SEPARATOR)


def relative_path(filename: str, root: str) -> str:
    """Compute ``filename`` relative to ``root``.

    When ``filename`` lives under ``root`` the prefix is cut off verbatim,
    otherwise ``os.path.relpath`` is used. Leading separators are stripped.
    """
    filename_export = to_export_path(filename)
    root_export = to_export_path(root).rstrip(EXPORT_PATH_SEPARATOR)

    if root_export and filename_export.startswith(root_export + EXPORT_PATH_SEPARATOR):
        rel = filename_export[len(root_export):]
    elif not root_export and filename_export.startswith(EXPORT_PATH_SEPARATOR):
        rel = filename_export
    else:
        try:
            rel = to_export_path(os.path.relpath(filename, root))
        except ValueError:
            # Different drives on Windows.
            rel = filename_export
    return rel.lstrip(EXPORT_PATH_SEPARATOR)


def get_version(path: str) -> str | None:
    """Extract the leading directory of ``path`` as a version name.

    Returns:
        The first path segment, or None when ``path`` has no directory
        component (e.g. a file directly under the root).
    """
    match = _VERSION_SEGMENT_RE.match(to_export_path(path))
    if match:
        return match.group(1)
    return None


def normalize_file_path(
    filename: str,
    root: str,
    use_versions: bool = False,
) -> NormalizedPath:
    """Compute the exported ``path``/``root``/``version`` triple for a file.

    Args:
        filename: Absolute (or root-prefixed) path of the source file.
        root: Directory the export paths are relative to.
        use_versions: Treat the first directory under ``root`` as a version
            name, strip it from the path and append it to the root.

    Returns:
        NormalizedPath. On a version non-match the path and root are
        returned unchanged and ``version`` is None.
    """
    path = relative_path(filename, root)
    if not use_versions:
        return NormalizedPath(path=path, root=root, version=None)

    version = get_version(path)
    if version is None:
        return NormalizedPath(path=path, root=root, version=None)

    path = path[len(version):].lstrip(EXPORT_PATH_SEPARATOR)
    return NormalizedPath(
        path=path,
        root=os.path.join(root, version),
        version=version,
    )


def normalize_php_name(name: str) -> str:
    """Strip whitespace from a PHP name reference."""
    return _WHITESPACE_RE.sub("", name)


def qualify_php_name(
    name: str,
    namespace: str | None = None,
    aliases: dict[str, str] | None = None,
) -> str:
    """Resolve a class reference to its fully qualified ``\\``-prefixed form.

    Args:
        name: Name as written in source (``Foo``, ``Sub\\Foo``, ``\\Foo``).
        namespace: Enclosing namespace, or None for the global namespace.
        aliases: ``use`` imports, alias -> fully qualified name.

    Returns:
        Fully qualified name with a leading backslash.
    """
    name = normalize_php_name(name)
    if not name:
        return name
    if name.startswith(PHP_NAMESPACE_SEPARATOR):
        return name

    head, sep, tail = name.partition(PHP_NAMESPACE_SEPARATOR)
    if aliases:
        target = aliases.get(head) or aliases.get(head.lower())
        if target:
            resolved = target.lstrip(PHP_NAMESPACE_SEPARATOR)
            if sep:
                resolved = f"{resolved}{PHP_NAMESPACE_SEPARATOR}{tail}"
            return PHP_NAMESPACE_SEPARATOR + resolved

    if namespace and namespace != "global":
        return f"{PHP_NAMESPACE_SEPARATOR}{namespace}{PHP_NAMESPACE_SEPARATOR}{name}"
    return PHP_NAMESPACE_SEPARATOR + name
