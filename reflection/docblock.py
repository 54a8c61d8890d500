"""
Docblock parsing.

Splits a ``/** ... */`` comment into a short description, a long
description and a list of tags. Tags are parsed into a closed set of
variants, each carrying only the facets that tag kind supports:

* ``Tag``          - name and description only
* ``TypedTag``     - adds ``types`` (``@return``, ``@throws``)
* ``VariableTag``  - adds ``types`` and ``variable`` (``@param``, ``@var``)
* ``LinkTag``      - adds ``link`` (``@link``)
* ``ReferenceTag`` - adds ``reference`` (``@see``, ``@uses``)
* ``VersionTag``   - adds ``version`` (``@since``, ``@deprecated``)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

_DOCBLOCK_START_RE = re.compile(r"^/\*\*(?:\s|$)")
_TAG_LINE_RE = re.compile(r"^@([\w\-\\:]+)(.*)$", re.DOTALL)
# A release vector starts with a digit; VCS vectors look like "svn: $Rev: 12 $".
_VERSION_RE = re.compile(r"^(\d\S*|[^\s:]+:\s*\$[^$]+\$)", re.DOTALL)
_VARIABLE_PREFIXES = ("$", "&$", "...$")

TYPED_TAGS = frozenset({"return", "throws", "method"})
VARIABLE_TAGS = frozenset({"param", "var", "property", "property-read", "property-write"})
LINK_TAGS = frozenset({"link"})
REFERENCE_TAGS = frozenset({"see", "uses", "used-by", "covers"})
VERSION_TAGS = frozenset({"since", "version", "deprecated"})


@dataclass
class Tag:
    """A docblock tag with no facets beyond its description."""

    name: str
    description: str = ""


@dataclass
class TypedTag(Tag):
    """Tag carrying a type list."""

    types: List[str] = field(default_factory=list)


@dataclass
class VariableTag(TypedTag):
    """Tag carrying a type list and a variable name."""

    variable: str = ""


@dataclass
class LinkTag(Tag):
    """Tag carrying a URL."""

    link: str = ""


@dataclass
class ReferenceTag(Tag):
    """Tag referring to another structural element."""

    reference: str = ""


@dataclass
class VersionTag(Tag):
    """Tag carrying a version string."""

    version: str = ""


@dataclass
class DocBlock:
    """Parsed documentation comment."""

    short_description: str = ""
    long_description: str = ""
    tags: List[Tag] = field(default_factory=list)

    def get_tags(self, name: str) -> List[Tag]:
        """Return all tags called ``name`` in source order."""
        return [tag for tag in self.tags if tag.name == name]

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)


def is_docblock(comment_text: str) -> bool:
    """Check whether a comment is a ``/** */`` documentation comment."""
    stripped = comment_text.strip()
    return bool(_DOCBLOCK_START_RE.match(stripped)) and stripped.endswith("*/")


def clean_docblock(comment_text: str) -> List[str]:
    """Strip the comment delimiters and leading asterisks.

    Returns:
        The comment body as a list of lines. Blank lines are kept since they
        separate the short and long descriptions.
    """
    text = comment_text.strip()
    if text.startswith("/**"):
        text = text[3:]
    if text.endswith("*/"):
        text = text[:-2]

    lines = []
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:]
            # Keep indentation after the asterisk for code samples.
            if stripped.startswith(" "):
                stripped = stripped[1:]
        lines.append(stripped.rstrip())

    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _split_sections(lines: List[str]) -> tuple[List[str], List[str]]:
    """Split cleaned lines into description lines and tag blocks."""
    description: List[str] = []
    tag_blocks: List[str] = []
    for line in lines:
        if line.lstrip().startswith("@"):
            tag_blocks.append(line.strip())
        elif tag_blocks:
            tag_blocks[-1] = f"{tag_blocks[-1]}\n{line.strip()}"
        else:
            description.append(line)
    return description, [block.strip() for block in tag_blocks]


def _split_description(lines: List[str]) -> tuple[str, str]:
    """Split description lines into the short and long description.

    The short description ends at the first blank line or at the first line
    ending with a full stop.
    """
    short: List[str] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        if not line.strip():
            break
        short.append(line.strip())
        index += 1
        if line.rstrip().endswith("."):
            break

    long_lines = lines[index:]
    while long_lines and not long_lines[0].strip():
        long_lines.pop(0)
    return "\n".join(short).strip(), "\n".join(long_lines).strip()


def _split_types(token: str) -> List[str]:
    return [part for part in token.split("|") if part]


def _next_token(text: str) -> tuple[str, str]:
    parts = text.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def _parse_variable_tag(name: str, body: str) -> VariableTag:
    first, rest = _next_token(body)
    types: List[str] = []
    variable = ""
    if first.startswith(_VARIABLE_PREFIXES):
        variable = first
    elif first:
        types = _split_types(first)
        second, remainder = _next_token(rest)
        if second.startswith(_VARIABLE_PREFIXES):
            variable = second
            rest = remainder
    return VariableTag(
        name=name,
        description=rest.strip(),
        types=types,
        variable=variable,
    )


def _parse_version_tag(name: str, body: str) -> VersionTag:
    match = _VERSION_RE.match(body)
    if not match:
        # e.g. "@since MU (3.0.0)": no version, the whole body is description
        return VersionTag(name=name, description=body.strip(), version="")
    return VersionTag(
        name=name,
        description=body[match.end():].strip(),
        version=match.group(1),
    )


def parse_tag(block: str) -> Optional[Tag]:
    """Parse a single tag block (``@name body...``) into its variant."""
    match = _TAG_LINE_RE.match(block)
    if not match:
        return None
    name = match.group(1)
    body = match.group(2).strip()

    if name in VARIABLE_TAGS:
        return _parse_variable_tag(name, body)
    if name in TYPED_TAGS:
        first, rest = _next_token(body)
        return TypedTag(name=name, description=rest.strip(), types=_split_types(first))
    if name in LINK_TAGS:
        first, rest = _next_token(body)
        # Without a description the URL doubles as the description.
        return LinkTag(name=name, description=rest.strip() or first, link=first)
    if name in REFERENCE_TAGS:
        first, rest = _next_token(body)
        return ReferenceTag(name=name, description=rest.strip(), reference=first)
    if name in VERSION_TAGS:
        return _parse_version_tag(name, body)
    return Tag(name=name, description=body)


def parse_docblock(comment_text: str) -> DocBlock:
    """Parse a raw ``/** ... */`` comment into a DocBlock.

    Example:
        >>> doc = parse_docblock("/**\\n * Summary.\\n *\\n * @since 2.0\\n */")
        >>> doc.short_description, doc.tags[0].version
        ('Summary.', '2.0')
    """
    lines = clean_docblock(comment_text)
    description_lines, tag_blocks = _split_sections(lines)
    short_description, long_description = _split_description(description_lines)

    tags: List[Tag] = []
    for block in tag_blocks:
        tag = parse_tag(block)
        if tag is not None:
            tags.append(tag)

    return DocBlock(
        short_description=short_description,
        long_description=long_description,
        tags=tags,
    )
