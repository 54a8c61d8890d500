"""
Docblock export.

Normalizes an element's documentation comment (or its absence) into a
DocblockRecord, and each tag into a TagRecord carrying only the facets its
tag variant supports.
"""

import re
from typing import Any, Callable, Optional

from exporter.records import DocblockRecord, TagRecord
from reflection.docblock import (
    DocBlock,
    LinkTag,
    ReferenceTag,
    Tag,
    TypedTag,
    VariableTag,
    VersionTag,
)

# Renders a free-text description (e.g. Markdown to HTML); identity by default.
Formatter = Callable[[str], str]

_LINE_BREAKS_RE = re.compile(r"[\n\r]+")


def identity_formatter(text: str) -> str:
    return text


def collapse_line_breaks(text: str) -> str:
    """Replace every run of line breaks with a single space."""
    return _LINE_BREAKS_RE.sub(" ", text)


def empty_docblock() -> DocblockRecord:
    """Record used for elements without a documentation comment."""
    return {
        "description": "",
        "long_description": "",
        "tags": [],
    }


def export_tag(tag: Tag, formatter: Formatter = identity_formatter) -> TagRecord:
    """Build the TagRecord for one tag.

    Facets are added in a fixed order: types, link, variable, reference and
    finally the version override, which may replace ``content``.
    """
    record: TagRecord = {
        "name": tag.name,
        "content": collapse_line_breaks(formatter(tag.description)),
    }
    if isinstance(tag, TypedTag):
        record["types"] = list(tag.types)
    if isinstance(tag, LinkTag):
        record["link"] = tag.link
    if isinstance(tag, VariableTag):
        record["variable"] = tag.variable
    if isinstance(tag, ReferenceTag):
        record["refers"] = tag.reference
    if isinstance(tag, VersionTag):
        if tag.version:
            record["content"] = tag.version
        description = collapse_line_breaks(formatter(tag.description))
        if description:
            record["description"] = description
    return record


def export_docblock(
    element: Any,
    formatter: Optional[Formatter] = None,
) -> DocblockRecord:
    """Export the docblock attached to ``element``.

    Args:
        element: Any reflection object with a ``doc`` attribute holding a
            DocBlock or None.
        formatter: Renderer applied to tag descriptions.

    Returns:
        DocblockRecord; all three keys are present even without a docblock.
    """
    docblock: Optional[DocBlock] = getattr(element, "doc", None)
    if docblock is None:
        return empty_docblock()

    formatter = formatter or identity_formatter
    return {
        "description": collapse_line_breaks(docblock.short_description),
        "long_description": collapse_line_breaks(docblock.long_description),
        "tags": [export_tag(tag, formatter) for tag in docblock.tags],
    }
