"""
AST traversal and reflection of PHP files.

This module walks the tree-sitter PHP syntax tree and builds a
``FileReflection``: the file docblock, includes, constants, functions,
classes (with methods and properties) and, for every scope that can run
code (the file, each function, each method), the ordered call-sites made
in it. Hook call-sites (``do_action``, ``apply_filters``, ...) are recorded
both as ordinary function calls and as hooks.
"""

import logging
import os
import re
from typing import Dict, List, Optional, Union

from tree_sitter import Node, Tree

from core.path_contract import PHP_NAMESPACE_SEPARATOR, normalize_php_name, qualify_php_name
from reflection.config import (
    CLASS_NODE,
    COMMENT_NODE,
    CONST_NODE,
    DEFAULT_VISIBILITY,
    DEFINE_FUNCTION,
    FUNCTION_CALL_NODE,
    FUNCTION_NODE,
    GLOBAL_NAMESPACE,
    HOOK_TYPE_MAP,
    INCLUDE_TYPE_MAP,
    METHOD_CALL_NODES,
    METHOD_NODE,
    NAMESPACE_NODE,
    NAMESPACE_USE_NODE,
    PARAMETER_NODES,
    PHP_EXTENSION,
    PROPERTY_NODE,
    SKIPPED_DECLARATIONS,
    STATEMENT_CONTAINERS,
    STATIC_CALL_NODE,
    STRING_CONTENT_NODES,
    STRING_NODES,
    USES_FUNCTIONS,
    USES_HOOKS,
    USES_METHODS,
)
from reflection.docblock import DocBlock, is_docblock, parse_docblock
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
from reflection.parser import count_error_nodes, parse_bytes, parse_file

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"\s+")
_QUOTED_NAME_RE = re.compile(r"""^['"]([^'"]*)['"]$""")
_DYNAMIC_NAME_RE = re.compile(
    r"""(?:['"]([^'"]*)['"]\s*\.\s*)?"""  # leading literal
    r"""(\$[^\s]*)"""                      # variable part
    r"""(?:\s*\.\s*['"]([^'"]*)['"])?"""  # trailing literal
)
_USE_PREFIX_RE = re.compile(r"^use\s+(?:(?:function|const)\s+)?", re.IGNORECASE)
_USE_GROUP_RE = re.compile(r"^(.*?)\{(.*)\}$", re.DOTALL)
_USE_ALIAS_RE = re.compile(r"\s+as\s+", re.IGNORECASE)

# Top-level nodes that take the first docblock of a file as their own
_DECLARATION_NODES = {FUNCTION_NODE, CLASS_NODE, CONST_NODE} | SKIPPED_DECLARATIONS

# Type hints that are never class references
_BUILTIN_TYPES = {
    "array", "bool", "callable", "false", "float", "int", "iterable", "mixed",
    "never", "null", "object", "parent", "self", "static", "string", "true", "void",
}

Scope = Union[FileReflection, FunctionReflection]


def node_text(node: Optional[Node]) -> str:
    """Decode the source text of a node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def collapse_whitespace(text: str) -> str:
    return _SPACE_RE.sub(" ", text).strip()


def start_line(node: Node) -> int:
    return node.start_point.row + 1


def end_line(node: Node) -> int:
    return node.end_point.row + 1


def _first_child_of_type(node: Node, node_type: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def clean_hook_name(raw_name: str) -> str:
    """Clean the first argument of a hook call into a hook name.

    ``'init'`` becomes ``init`` and ``'edit_' . $taxonomy . '_form'``
    becomes ``edit_{$taxonomy}_form``. Anything else is returned as written.
    """
    match = _QUOTED_NAME_RE.match(raw_name)
    if match:
        return match.group(1)

    match = _DYNAMIC_NAME_RE.search(raw_name)
    if match:
        prefix = match.group(1) or ""
        if match.group(3) is not None:
            return f"{prefix}{{{match.group(2)}}}{match.group(3)}"
        return f"{prefix}{{{match.group(2)}}}"

    return raw_name


def _unquote(text: str) -> Optional[str]:
    if text[:1].lower() == "b" and text[1:2] in ("'", '"'):
        text = text[1:]
    if len(text) < 2 or text[0] != text[-1] or text[0] not in ("'", '"'):
        return None
    inner = text[1:-1]
    if text[0] == "'":
        inner = inner.replace("\\'", "'").replace("\\\\", "\\")
    return inner


def literal_argument(arg_node: Node) -> CallArgument:
    """Describe a call argument, extracting its value when it is a literal."""
    expr = arg_node
    if arg_node.type == "argument" and arg_node.named_children:
        expr = arg_node.named_children[-1]

    text = collapse_whitespace(node_text(arg_node))
    raw = node_text(expr).strip()

    if expr.type in STRING_NODES:
        if all(child.type in STRING_CONTENT_NODES for child in expr.named_children):
            value = _unquote(raw)
            if value is not None:
                return CallArgument(text=text, kind="string", value=value)
    elif expr.type == "integer":
        try:
            return CallArgument(text=text, kind="integer", value=int(raw.replace("_", ""), 0))
        except ValueError:
            pass
    elif expr.type == "float":
        try:
            return CallArgument(text=text, kind="float", value=float(raw.replace("_", "")))
        except ValueError:
            pass

    return CallArgument(text=text)


def _modifiers(node: Node) -> Dict[str, object]:
    """Collect visibility/static/abstract/final modifiers of a declaration."""
    result: Dict[str, object] = {
        "visibility": None,
        "static": False,
        "abstract": False,
        "final": False,
    }
    for child in node.children:
        if child.type == "visibility_modifier":
            result["visibility"] = node_text(child).strip().lower()
        elif child.type == "var_modifier":
            result["visibility"] = DEFAULT_VISIBILITY
        elif child.type == "static_modifier":
            result["static"] = True
        elif child.type == "abstract_modifier":
            result["abstract"] = True
        elif child.type == "final_modifier":
            result["final"] = True
    return result


class _FileReflector:
    """Single-pass walker filling one FileReflection."""

    def __init__(self, source_bytes: bytes, file_reflection: FileReflection):
        self.source_bytes = source_bytes
        self.file = file_reflection
        self.namespace = GLOBAL_NAMESPACE
        self.aliases: Dict[str, str] = {}
        self.file_doc_node: Optional[Node] = None

    def reflect(self, root: Node) -> FileReflection:
        self.file_doc_node = find_file_docblock(root)
        if self.file_doc_node is not None:
            self.file.doc = parse_docblock(node_text(self.file_doc_node))
        self._walk(root, self.file, None)
        return self.file

    # -- traversal -----------------------------------------------------

    def _walk(self, node: Node, scope: Scope, current_class: Optional[ClassReflection]) -> None:
        for child in node.named_children:
            self._visit(child, scope, current_class)

    def _visit(self, node: Node, scope: Scope, current_class: Optional[ClassReflection]) -> None:
        node_type = node.type

        if node_type == COMMENT_NODE or node_type in SKIPPED_DECLARATIONS:
            return
        if node_type == NAMESPACE_NODE:
            self._visit_namespace(node, scope, current_class)
        elif node_type == NAMESPACE_USE_NODE:
            self._visit_use(node)
        elif node_type == FUNCTION_NODE:
            self._visit_function(node)
        elif node_type == CLASS_NODE:
            self._visit_class(node)
        elif node_type == CONST_NODE:
            self._visit_const(node)
        elif node_type == FUNCTION_CALL_NODE:
            self._visit_function_call(node, scope)
            self._walk(node, scope, current_class)
        elif node_type in METHOD_CALL_NODES or node_type == STATIC_CALL_NODE:
            self._visit_method_call(node, scope, current_class)
            self._walk(node, scope, current_class)
        elif node_type in INCLUDE_TYPE_MAP:
            self._visit_include(node)
            self._walk(node, scope, current_class)
        else:
            self._walk(node, scope, current_class)

    # -- declarations --------------------------------------------------

    def _doc_for(self, node: Node) -> Optional[DocBlock]:
        """Return the docblock directly preceding ``node``, if any."""
        sibling = node.prev_named_sibling
        if sibling is None or sibling.type != COMMENT_NODE:
            return None
        if self.file_doc_node is not None and sibling == self.file_doc_node:
            return None
        text = node_text(sibling)
        if not is_docblock(text):
            return None
        return parse_docblock(text)

    def _statement_doc(self, node: Node) -> Optional[DocBlock]:
        """Return the docblock preceding the statement that contains ``node``."""
        current = node
        while current.parent is not None and current.parent.type not in STATEMENT_CONTAINERS:
            current = current.parent
        return self._doc_for(current)

    def _visit_namespace(self, node: Node, scope: Scope, current_class: Optional[ClassReflection]) -> None:
        name_node = node.child_by_field_name("name")
        name = normalize_php_name(node_text(name_node)).strip(PHP_NAMESPACE_SEPARATOR)
        body = node.child_by_field_name("body")

        if body is None:
            # "namespace Foo;" applies to the rest of the file
            self.namespace = name or GLOBAL_NAMESPACE
            self.aliases = {}
            return

        saved_namespace, saved_aliases = self.namespace, self.aliases
        self.namespace = name or GLOBAL_NAMESPACE
        self.aliases = {}
        self._walk(body, scope, current_class)
        self.namespace, self.aliases = saved_namespace, saved_aliases

    def _visit_use(self, node: Node) -> None:
        body = collapse_whitespace(node_text(node)).rstrip(";").strip()
        body = _USE_PREFIX_RE.sub("", body)

        prefix = ""
        group = _USE_GROUP_RE.match(body)
        if group:
            prefix = normalize_php_name(group.group(1)).strip(PHP_NAMESPACE_SEPARATOR)
            clauses = group.group(2).split(",")
        else:
            clauses = body.split(",")

        for clause in clauses:
            clause = clause.strip()
            if not clause:
                continue
            parts = _USE_ALIAS_RE.split(clause)
            full_name = normalize_php_name(parts[0]).strip(PHP_NAMESPACE_SEPARATOR)
            if prefix:
                full_name = f"{prefix}{PHP_NAMESPACE_SEPARATOR}{full_name}"
            if len(parts) > 1:
                alias = parts[1].strip()
            else:
                alias = full_name.rsplit(PHP_NAMESPACE_SEPARATOR, 1)[-1]
            self.aliases[alias] = full_name

    def _arguments(self, node: Node) -> List[ArgumentReflection]:
        params = node.child_by_field_name("parameters")
        if params is None:
            return []

        arguments = []
        for param in params.named_children:
            if param.type not in PARAMETER_NODES:
                continue
            name_node = param.child_by_field_name("name")
            if name_node is not None and name_node.type != "variable_name":
                # by-reference promoted parameters wrap the variable
                name_node = _first_child_of_type(name_node, "variable_name") or name_node
            if name_node is None:
                name_node = _first_child_of_type(param, "variable_name")
            default_node = param.child_by_field_name("default_value")
            type_node = param.child_by_field_name("type")

            arguments.append(
                ArgumentReflection(
                    name=node_text(name_node).lstrip("&"),
                    default=collapse_whitespace(node_text(default_node)) if default_node else None,
                    type=self._type_hint(type_node),
                )
            )
        return arguments

    def _type_hint(self, type_node: Optional[Node]) -> Optional[str]:
        if type_node is None:
            return None
        # some grammar versions wrap a single type in a one-member union
        while type_node.type == "union_type" and type_node.named_child_count == 1:
            type_node = type_node.named_children[0]
        text = collapse_whitespace(node_text(type_node))
        if type_node.type == "named_type" and text.lower() not in _BUILTIN_TYPES:
            return qualify_php_name(text, self.namespace, self.aliases)
        return text

    def _visit_function(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            logger.debug(f"Function at line {start_line(node)} has no name")
            return

        function = FunctionReflection(
            name=node_text(name_node),
            line=start_line(node),
            end_line=end_line(node),
            namespace=self.namespace,
            aliases=dict(self.aliases),
            arguments=self._arguments(node),
            doc=self._doc_for(node),
        )
        self.file.functions.append(function)
        logger.debug(f"Reflected function {function.name} at line {function.line}")

        body = node.child_by_field_name("body")
        if body is not None:
            self._walk(body, function, None)

    def _visit_class(self, node: Node) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            logger.debug(f"Class at line {start_line(node)} has no name")
            return

        extends: Optional[str] = None
        implements: List[str] = []
        for child in node.named_children:
            if child.type == "base_clause":
                parents = [c for c in child.named_children if c.type in ("name", "qualified_name")]
                if parents:
                    extends = qualify_php_name(node_text(parents[0]), self.namespace, self.aliases)
            elif child.type == "class_interface_clause":
                implements = [
                    qualify_php_name(node_text(c), self.namespace, self.aliases)
                    for c in child.named_children
                    if c.type in ("name", "qualified_name")
                ]

        modifiers = _modifiers(node)
        cls = ClassReflection(
            name=node_text(name_node),
            line=start_line(node),
            end_line=end_line(node),
            namespace=self.namespace,
            final=bool(modifiers["final"]),
            abstract=bool(modifiers["abstract"]),
            extends=extends,
            implements=implements,
            doc=self._doc_for(node),
        )
        self.file.classes.append(cls)
        logger.debug(f"Reflected class {cls.name} at line {cls.line}")

        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in body.named_children:
            if member.type == METHOD_NODE:
                self._visit_method(member, cls)
            elif member.type == PROPERTY_NODE:
                cls.properties.extend(self._properties(member))

    def _visit_method(self, node: Node, cls: ClassReflection) -> None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return

        modifiers = _modifiers(node)
        method = MethodReflection(
            name=node_text(name_node),
            line=start_line(node),
            end_line=end_line(node),
            namespace=cls.namespace,
            aliases=dict(self.aliases),
            arguments=self._arguments(node),
            doc=self._doc_for(node),
            final=bool(modifiers["final"]),
            abstract=bool(modifiers["abstract"]),
            static=bool(modifiers["static"]),
            visibility=str(modifiers["visibility"] or DEFAULT_VISIBILITY),
        )
        cls.methods.append(method)

        body = node.child_by_field_name("body")
        if body is not None:
            self._walk(body, method, cls)

    def _properties(self, node: Node) -> List[PropertyReflection]:
        modifiers = _modifiers(node)
        doc = self._doc_for(node)
        properties = []
        for element in node.named_children:
            if element.type != "property_element":
                continue
            name_node = element.child_by_field_name("name") or _first_child_of_type(element, "variable_name")
            default_node = element.child_by_field_name("default_value")
            if default_node is None:
                initializer = _first_child_of_type(element, "property_initializer")
                if initializer is not None and initializer.named_children:
                    default_node = initializer.named_children[0]

            properties.append(
                PropertyReflection(
                    name=node_text(name_node),
                    line=start_line(element),
                    end_line=end_line(element),
                    default=collapse_whitespace(node_text(default_node)) if default_node else None,
                    static=bool(modifiers["static"]),
                    visibility=str(modifiers["visibility"] or DEFAULT_VISIBILITY),
                    doc=doc,
                )
            )
        return properties

    def _visit_const(self, node: Node) -> None:
        for element in node.named_children:
            if element.type != "const_element":
                continue
            children = [c for c in element.named_children if c.type != COMMENT_NODE]
            name_node = _first_child_of_type(element, "name")
            if name_node is None:
                continue
            value_node = children[-1] if len(children) > 1 else None
            self.file.constants.append(
                ConstantReflection(
                    name=node_text(name_node),
                    line=start_line(element),
                    value=collapse_whitespace(node_text(value_node)),
                )
            )

    def _visit_include(self, node: Node) -> None:
        expr = node.named_children[0] if node.named_children else None
        self.file.includes.append(
            IncludeReflection(
                name=collapse_whitespace(node_text(expr)),
                line=start_line(node),
                type=INCLUDE_TYPE_MAP[node.type],
            )
        )

    # -- call-sites ----------------------------------------------------

    def _call_arguments(self, node: Node) -> List[CallArgument]:
        args_node = node.child_by_field_name("arguments")
        if args_node is None:
            return []
        return [
            literal_argument(arg)
            for arg in args_node.named_children
            if arg.type != COMMENT_NODE
        ]

    def _visit_function_call(self, node: Node, scope: Scope) -> None:
        function_node = node.child_by_field_name("function")
        if function_node is not None and function_node.type in ("name", "qualified_name"):
            name = normalize_php_name(node_text(function_node)).lstrip(PHP_NAMESPACE_SEPARATOR)
        else:
            name = collapse_whitespace(node_text(function_node))

        arguments = self._call_arguments(node)
        call = FunctionCall(
            name=name,
            line=start_line(node),
            end_line=end_line(node),
            arguments=arguments,
        )
        scope.uses.setdefault(USES_FUNCTIONS, []).append(call)

        if name in HOOK_TYPE_MAP and arguments:
            hook = HookReflection(
                name=clean_hook_name(arguments[0].text),
                line=call.line,
                end_line=call.end_line,
                type=HOOK_TYPE_MAP[name],
                arguments=[argument.text for argument in arguments[1:]],
                doc=self._statement_doc(node),
            )
            scope.uses.setdefault(USES_HOOKS, []).append(hook)
            logger.debug(f"Reflected {hook.type} hook '{hook.name}' at line {hook.line}")

        if name == DEFINE_FUNCTION and len(arguments) >= 2 and arguments[0].kind == "string":
            self.file.constants.append(
                ConstantReflection(
                    name=str(arguments[0].value),
                    line=call.line,
                    value=arguments[1].text,
                )
            )

    def _class_reference(self, cls: ClassReflection) -> str:
        return qualify_php_name(cls.name, cls.namespace)

    def _visit_method_call(
        self,
        node: Node,
        scope: Scope,
        current_class: Optional[ClassReflection],
    ) -> None:
        method_name = collapse_whitespace(node_text(node.child_by_field_name("name")))

        if node.type == STATIC_CALL_NODE:
            static = True
            caller = collapse_whitespace(node_text(node.child_by_field_name("scope")))
            keyword = caller.lower()
            if keyword in ("self", "static") and current_class is not None:
                class_name = self._class_reference(current_class)
            elif keyword == "parent" and current_class is not None and current_class.extends:
                class_name = current_class.extends
            elif caller.startswith("$") or keyword in ("self", "static", "parent"):
                class_name = caller
            else:
                class_name = qualify_php_name(caller, self.namespace, self.aliases)
        else:
            static = False
            caller = collapse_whitespace(node_text(node.child_by_field_name("object")))
            if caller == "$this" and current_class is not None:
                class_name = self._class_reference(current_class)
            else:
                class_name = caller

        scope.uses.setdefault(USES_METHODS, []).append(
            MethodCall(
                class_name=class_name,
                method_name=method_name,
                line=start_line(node),
                end_line=end_line(node),
                static=static,
                arguments=self._call_arguments(node),
            )
        )


def find_file_docblock(root: Node) -> Optional[Node]:
    """Locate the file-level docblock among the top-level statements.

    The first docblock of a file documents the file itself unless it sits
    directly on a declaration. A docblock carrying ``@package`` always
    documents the file.
    """
    children = [c for c in root.named_children if c.type not in ("php_tag", "text")]
    for index, child in enumerate(children):
        if child.type != COMMENT_NODE:
            return None
        text = node_text(child)
        if not is_docblock(text):
            continue
        following = children[index + 1] if index + 1 < len(children) else None
        if following is None or following.type == COMMENT_NODE:
            return child
        if following.type in _DECLARATION_NODES:
            return child if parse_docblock(text).has_tag("package") else None
        return child
    return None


def reflect_tree(tree: Tree, source_bytes: bytes, file_path: str) -> FileReflection:
    """Build a FileReflection from an already parsed tree.

    Args:
        tree: The parsed AST tree.
        source_bytes: The raw source file bytes.
        file_path: Path recorded on the reflection.

    Returns:
        The populated FileReflection.
    """
    reflection = FileReflection(path=file_path)
    _FileReflector(source_bytes, reflection).reflect(tree.root_node)
    logger.debug(
        "Reflected %s: %d functions, %d classes, %d includes, %d constants",
        file_path,
        len(reflection.functions),
        len(reflection.classes),
        len(reflection.includes),
        len(reflection.constants),
    )
    return reflection


def reflect_source(source_bytes: bytes, file_path: str = "") -> FileReflection:
    """Parse and reflect PHP source held in memory."""
    tree = parse_bytes(source_bytes)
    reflection = reflect_tree(tree, source_bytes, file_path)
    reflection.parse_error_count = count_error_nodes(tree) if tree.root_node.has_error else 0
    return reflection


def reflect_file(file_path: str) -> FileReflection:
    """Parse and reflect a PHP file from disk.

    Args:
        file_path: Path to the .php file.

    Returns:
        The FileReflection. Files with syntax errors are reflected as far as
        the tree allows; ``parse_error_count`` records the damage.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a PHP source file.
    """
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1].lstrip(".")
    if ext != PHP_EXTENSION:
        raise ValueError(f"File {file_path} is not a PHP source file")

    tree, source_bytes = parse_file(file_path)
    reflection = reflect_tree(tree, source_bytes, file_path)
    if tree.root_node.has_error:
        reflection.parse_error_count = count_error_nodes(tree)
        logger.warning(
            "File %s contains syntax errors (%d error nodes)",
            file_path,
            reflection.parse_error_count,
        )
    return reflection
