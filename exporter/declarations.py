"""
Declaration export: arguments, properties, functions, methods and classes.

Each exporter is a structural mapping from reflection objects to records.
Functions and methods only carry ``uses``/``hooks`` when their body made
calls.
"""

from typing import Any, Iterable, List, Optional

from exporter.docblock import Formatter, export_docblock
from exporter.records import (
    ArgumentRecord,
    ClassRecord,
    FunctionRecord,
    MethodRecord,
    PropertyRecord,
)
from exporter.uses import DeprecationPolicy, export_hooks, export_uses, scope_hooks
from reflection.models import (
    ArgumentReflection,
    ClassReflection,
    FunctionReflection,
    MethodReflection,
    PropertyReflection,
)


def export_arguments(arguments: Iterable[ArgumentReflection]) -> List[ArgumentRecord]:
    return [
        {
            "name": argument.name,
            "default": argument.default,
            "type": argument.type,
        }
        for argument in arguments
    ]


def export_properties(
    properties: Iterable[PropertyReflection],
    formatter: Optional[Formatter] = None,
) -> List[PropertyRecord]:
    return [
        {
            "name": prop.name,
            "line": prop.line,
            "end_line": prop.end_line,
            "default": prop.default,
            "static": prop.static,
            "visibility": prop.visibility,
            "doc": export_docblock(prop, formatter),
        }
        for prop in properties
    ]


def _attach_usage(
    record: Any,
    scope: FunctionReflection,
    formatter: Optional[Formatter],
    deprecation_policy: DeprecationPolicy,
) -> None:
    if not scope.uses:
        return

    uses = export_uses(scope.uses, deprecation_policy)
    if uses:
        record["uses"] = uses

    hooks = scope_hooks(scope.uses)
    if hooks:
        record["hooks"] = export_hooks(hooks, formatter)


def export_functions(
    functions: Iterable[FunctionReflection],
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
) -> List[FunctionRecord]:
    output: List[FunctionRecord] = []
    for function in functions:
        record: FunctionRecord = {
            "name": function.name,
            "namespace": function.namespace,
            "aliases": dict(function.aliases),
            "line": function.line,
            "end_line": function.end_line,
            "arguments": export_arguments(function.arguments),
            "doc": export_docblock(function, formatter),
        }
        _attach_usage(record, function, formatter, deprecation_policy)
        output.append(record)
    return output


def export_methods(
    methods: Iterable[MethodReflection],
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
) -> List[MethodRecord]:
    output: List[MethodRecord] = []
    for method in methods:
        record: MethodRecord = {
            "name": method.name,
            "namespace": method.namespace,
            "aliases": dict(method.aliases),
            "line": method.line,
            "end_line": method.end_line,
            "final": method.final,
            "abstract": method.abstract,
            "static": method.static,
            "visibility": method.visibility,
            "arguments": export_arguments(method.arguments),
            "doc": export_docblock(method, formatter),
        }
        _attach_usage(record, method, formatter, deprecation_policy)
        output.append(record)
    return output


def export_classes(
    classes: Iterable[ClassReflection],
    formatter: Optional[Formatter] = None,
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
) -> List[ClassRecord]:
    return [
        {
            "name": cls.name,
            "namespace": cls.namespace,
            "line": cls.line,
            "end_line": cls.end_line,
            "final": cls.final,
            "abstract": cls.abstract,
            "extends": cls.extends,
            "implements": list(cls.implements),
            "properties": export_properties(cls.properties, formatter),
            "methods": export_methods(cls.methods, formatter, deprecation_policy),
            "doc": export_docblock(cls, formatter),
        }
        for cls in classes
    ]
