"""
Layer 1: Reflection Engine

Tree-sitter-based PHP source code parser and reflector.
Reflects functions, classes, methods, properties, constants, includes,
docblocks, hook call-sites and per-scope call usage.
"""

from reflection.docblock import (
    DocBlock,
    LinkTag,
    ReferenceTag,
    Tag,
    TypedTag,
    VariableTag,
    VersionTag,
    parse_docblock,
)
from reflection.models import (
    ArgumentReflection,
    CallArgument,
    ClassReflection,
    ConstantReflection,
    FileReflection,
    FunctionCall,
    FunctionReflection,
    HookReflection,
    IncludeReflection,
    MethodCall,
    MethodReflection,
    PropertyReflection,
)
from reflection.parser import create_parser, parse_file, parse_bytes, count_error_nodes
from reflection.reflector import reflect_file, reflect_source, reflect_tree

__all__ = [
    # Docblocks
    "DocBlock",
    "Tag",
    "TypedTag",
    "VariableTag",
    "LinkTag",
    "ReferenceTag",
    "VersionTag",
    "parse_docblock",
    # Data models
    "ArgumentReflection",
    "CallArgument",
    "ClassReflection",
    "ConstantReflection",
    "FileReflection",
    "FunctionCall",
    "FunctionReflection",
    "HookReflection",
    "IncludeReflection",
    "MethodCall",
    "MethodReflection",
    "PropertyReflection",
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    # Reflection
    "reflect_file",
    "reflect_source",
    "reflect_tree",
]
