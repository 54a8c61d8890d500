"""
Data models for reflected PHP declarations.

These objects are what the export layer consumes: every declaration carries
its start line, end line and optional docblock, and every scope that can
contain code (the file, each function, each method) carries a usage mapping
from call-kind (``functions``, ``methods``, ``hooks``) to call-sites in
source order.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from reflection.config import GLOBAL_NAMESPACE
from reflection.docblock import DocBlock

LiteralValue = Union[str, int, float]


@dataclass
class CallArgument:
    """One positional argument of a call-site.

    Attributes:
        text: Source text of the argument expression, whitespace-collapsed.
        kind: ``string``, ``integer``, ``float`` for simple literals,
            ``expression`` for anything else.
        value: Literal value for literal kinds, None for expressions.
    """

    text: str
    kind: str = "expression"
    value: Optional[LiteralValue] = None

    @property
    def is_literal(self) -> bool:
        return self.kind != "expression"


@dataclass
class FunctionCall:
    """A call to a named (or dynamic) function."""

    name: str
    line: int
    end_line: int
    arguments: List[CallArgument] = field(default_factory=list)


@dataclass
class MethodCall:
    """A call to an instance (``->``) or static (``::``) method."""

    class_name: str
    method_name: str
    line: int
    end_line: int
    static: bool = False
    arguments: List[CallArgument] = field(default_factory=list)

    @property
    def name(self) -> Tuple[str, str]:
        """Two-part reference: (class, method)."""
        return self.class_name, self.method_name


@dataclass
class HookReflection:
    """A hook call-site such as ``do_action( 'init' )``.

    Attributes:
        name: Cleaned hook name (``save_post``, ``{$taxonomy}_edit_form``).
        type: One of action, filter, action_reference, filter_reference,
            action_deprecated, filter_deprecated.
        arguments: Source text of the arguments after the hook name.
    """

    name: str
    line: int
    end_line: int
    type: str
    arguments: List[str] = field(default_factory=list)
    doc: Optional[DocBlock] = None


Call = Union[FunctionCall, MethodCall, HookReflection]
Uses = Dict[str, List[Call]]


@dataclass
class ArgumentReflection:
    name: str
    default: Optional[str] = None
    type: Optional[str] = None


@dataclass
class PropertyReflection:
    name: str
    line: int
    end_line: int
    default: Optional[str] = None
    static: bool = False
    visibility: str = "public"
    doc: Optional[DocBlock] = None


@dataclass
class FunctionReflection:
    name: str
    line: int
    end_line: int
    namespace: str = GLOBAL_NAMESPACE
    aliases: Dict[str, str] = field(default_factory=dict)
    arguments: List[ArgumentReflection] = field(default_factory=list)
    doc: Optional[DocBlock] = None
    uses: Uses = field(default_factory=dict)


@dataclass
class MethodReflection(FunctionReflection):
    final: bool = False
    abstract: bool = False
    static: bool = False
    visibility: str = "public"


@dataclass
class ClassReflection:
    name: str
    line: int
    end_line: int
    namespace: str = GLOBAL_NAMESPACE
    final: bool = False
    abstract: bool = False
    extends: Optional[str] = None
    implements: List[str] = field(default_factory=list)
    properties: List[PropertyReflection] = field(default_factory=list)
    methods: List[MethodReflection] = field(default_factory=list)
    doc: Optional[DocBlock] = None


@dataclass
class ConstantReflection:
    name: str
    line: int
    value: str


@dataclass
class IncludeReflection:
    name: str
    line: int
    type: str


@dataclass
class FileReflection:
    """Reflection of one PHP file.

    ``uses`` holds the file-scope usage: calls made outside of any function
    or method body.
    """

    path: str
    doc: Optional[DocBlock] = None
    includes: List[IncludeReflection] = field(default_factory=list)
    constants: List[ConstantReflection] = field(default_factory=list)
    functions: List[FunctionReflection] = field(default_factory=list)
    classes: List[ClassReflection] = field(default_factory=list)
    uses: Uses = field(default_factory=dict)
    parse_error_count: int = 0
