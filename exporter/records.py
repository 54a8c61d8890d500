"""Wire contract for exported records.

Every record is a plain dict built from str/int/bool/None/list values so a
list of FileRecords can be passed straight to ``json.dump``. Optional keys
are omitted rather than emitted empty.
"""

from typing import List, NotRequired, Optional, TypedDict, Union


class _TagRecordBase(TypedDict):
    name: str
    content: str


class TagRecord(_TagRecordBase, total=False):
    """Docblock tag; facet keys only appear for tags that support them."""

    types: List[str]
    link: str
    variable: str
    refers: str
    description: str


class DocblockRecord(TypedDict):
    description: str
    long_description: str
    tags: List[TagRecord]


class FunctionCallRecord(TypedDict):
    name: str
    line: int
    end_line: int
    deprecation_version: NotRequired[Union[str, int, float]]


# "class" is a keyword, hence the functional form.
MethodCallRecord = TypedDict(
    "MethodCallRecord",
    {
        "name": str,
        "class": str,
        "static": bool,
        "line": int,
        "end_line": int,
    },
)


class UsageRecord(TypedDict, total=False):
    functions: List[FunctionCallRecord]
    methods: List[MethodCallRecord]


class HookRecord(TypedDict):
    name: str
    line: int
    end_line: int
    type: str
    arguments: List[str]
    doc: DocblockRecord


class ArgumentRecord(TypedDict):
    name: str
    default: Optional[str]
    type: Optional[str]


class ConstantRecord(TypedDict):
    name: str
    line: int
    value: str


class IncludeRecord(TypedDict):
    name: str
    line: int
    type: str


class PropertyRecord(TypedDict):
    name: str
    line: int
    end_line: int
    default: Optional[str]
    static: bool
    visibility: str
    doc: DocblockRecord


class FunctionRecord(TypedDict):
    name: str
    namespace: str
    aliases: dict[str, str]
    line: int
    end_line: int
    arguments: List[ArgumentRecord]
    doc: DocblockRecord
    uses: NotRequired[UsageRecord]
    hooks: NotRequired[List[HookRecord]]


class MethodRecord(TypedDict):
    name: str
    namespace: str
    aliases: dict[str, str]
    line: int
    end_line: int
    final: bool
    abstract: bool
    static: bool
    visibility: str
    arguments: List[ArgumentRecord]
    doc: DocblockRecord
    uses: NotRequired[UsageRecord]
    hooks: NotRequired[List[HookRecord]]


class ClassRecord(TypedDict):
    name: str
    namespace: str
    line: int
    end_line: int
    final: bool
    abstract: bool
    extends: Optional[str]
    implements: List[str]
    properties: List[PropertyRecord]
    methods: List[MethodRecord]
    doc: DocblockRecord


class FileRecord(TypedDict):
    doc: DocblockRecord
    path: str
    root: str
    version: Optional[str]
    uses: NotRequired[UsageRecord]
    includes: NotRequired[List[IncludeRecord]]
    constants: NotRequired[List[ConstantRecord]]
    hooks: NotRequired[List[HookRecord]]
    functions: List[FunctionRecord]
    classes: List[ClassRecord]
