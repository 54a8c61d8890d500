"""
Layer 2: Export Engine

Normalizes PHP file reflections into stable, JSON-serializable records for
documentation generators.
"""

from exporter.declarations import (
    export_arguments,
    export_classes,
    export_functions,
    export_methods,
    export_properties,
)
from exporter.discovery import DiscoveryError, get_files
from exporter.docblock import export_docblock, export_tag, identity_formatter
from exporter.pipeline import (
    ExportStats,
    export_directory,
    export_file,
    iter_parse_files,
    parse_files,
)
from exporter.uses import CallKind, DeprecationPolicy, export_hooks, export_uses

__all__ = [
    # Discovery
    "DiscoveryError",
    "get_files",
    # Docblocks
    "export_docblock",
    "export_tag",
    "identity_formatter",
    # Usage and hooks
    "CallKind",
    "DeprecationPolicy",
    "export_uses",
    "export_hooks",
    # Declarations
    "export_arguments",
    "export_properties",
    "export_methods",
    "export_functions",
    "export_classes",
    # Pipeline
    "ExportStats",
    "export_file",
    "iter_parse_files",
    "parse_files",
    "export_directory",
]
