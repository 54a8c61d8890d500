"""
Usage and hook export.

``export_uses`` turns a scope's call-kind -> call-sites mapping into a
UsageRecord. Hooks are recorded under their own reserved call-kind and are
exported separately by ``export_hooks``.

Calls to the deprecation-reporting functions (``_deprecated_function`` and
friends) carry the version the code was deprecated in as their second
argument. That version is attached as ``deprecation_version``:

* ``DeprecationPolicy.FIRST_CALL`` (default) always annotates element 0 of
  the scope's ``functions`` list, whichever call matched. Downstream
  importers rely on this layout.
* ``DeprecationPolicy.MATCHING_CALL`` annotates the matching call itself.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from exporter.docblock import Formatter, export_docblock
from exporter.records import FunctionCallRecord, HookRecord, MethodCallRecord, UsageRecord
from reflection.config import DEPRECATION_FUNCTIONS, USES_FUNCTIONS, USES_HOOKS, USES_METHODS
from reflection.models import FunctionCall, HookReflection, MethodCall

logger = logging.getLogger(__name__)


class CallKind(str, Enum):
    """Call-kinds that appear in a UsageRecord."""

    FUNCTIONS = USES_FUNCTIONS
    METHODS = USES_METHODS


class DeprecationPolicy(str, Enum):
    """Which function-call record receives ``deprecation_version``."""

    FIRST_CALL = "first_call"
    MATCHING_CALL = "matching_call"


def export_function_call(call: FunctionCall) -> FunctionCallRecord:
    return {
        "name": call.name,
        "line": call.line,
        "end_line": call.end_line,
    }


def export_method_call(call: MethodCall) -> MethodCallRecord:
    class_name, method_name = call.name
    return {
        "name": method_name,
        "class": class_name,
        "static": call.static,
        "line": call.line,
        "end_line": call.end_line,
    }


_CALL_EXPORTERS: Dict[CallKind, Callable] = {
    CallKind.FUNCTIONS: export_function_call,
    CallKind.METHODS: export_method_call,
}


def resolve_call_kind(name: str) -> CallKind:
    """Map a usage key to its CallKind.

    Raises:
        ValueError: If ``name`` is not a known call-kind.
    """
    try:
        return CallKind(name)
    except ValueError:
        raise ValueError(
            f"Unknown call-kind '{name}'; expected one of "
            f"{', '.join(kind.value for kind in CallKind)}"
        ) from None


def _annotate_deprecation(
    records: List[FunctionCallRecord],
    record: FunctionCallRecord,
    call: FunctionCall,
    policy: DeprecationPolicy,
) -> None:
    if len(call.arguments) < 2 or not call.arguments[1].is_literal:
        logger.warning(
            "Call to %s at line %d has no literal version argument; "
            "deprecation_version not recorded",
            call.name,
            call.line,
        )
        return

    target = records[0] if policy is DeprecationPolicy.FIRST_CALL else record
    target["deprecation_version"] = call.arguments[1].value


def export_uses(
    uses: Mapping[str, Sequence],
    deprecation_policy: DeprecationPolicy = DeprecationPolicy.FIRST_CALL,
) -> UsageRecord:
    """Export the call-sites recorded in one scope.

    Args:
        uses: Mapping of call-kind (``functions``, ``methods``, ``hooks``)
            to call-sites in source order.
        deprecation_policy: Where to attach ``deprecation_version``.

    Returns:
        UsageRecord keyed by call-kind, in the order the kinds appear in
        ``uses``. The ``hooks`` kind is never included.

    Raises:
        ValueError: If ``uses`` contains an unknown call-kind.
    """
    out: UsageRecord = {}

    for kind_name, calls in uses.items():
        if kind_name == USES_HOOKS:
            continue
        kind = resolve_call_kind(kind_name)
        exporter = _CALL_EXPORTERS[kind]

        for call in calls:
            records = out.setdefault(kind.value, [])
            record = exporter(call)
            records.append(record)

            if kind is CallKind.FUNCTIONS and call.name in DEPRECATION_FUNCTIONS:
                _annotate_deprecation(records, record, call, deprecation_policy)

    return out


def export_hooks(
    hooks: Iterable[HookReflection],
    formatter: Optional[Formatter] = None,
) -> List[HookRecord]:
    """Export hook call-sites one to one, in source order."""
    return [
        {
            "name": hook.name,
            "line": hook.line,
            "end_line": hook.end_line,
            "type": hook.type,
            "arguments": list(hook.arguments),
            "doc": export_docblock(hook, formatter),
        }
        for hook in hooks
    ]


def scope_hooks(uses: Mapping[str, Sequence]) -> List[HookReflection]:
    """Return the hooks recorded in a scope's usage mapping."""
    return list(uses.get(USES_HOOKS, []))
