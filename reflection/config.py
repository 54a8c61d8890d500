"""
Configuration constants for PHP reflection.

Defines the tree-sitter-php node type strings and the WordPress-style
function names the reflector treats specially.
"""

from typing import Dict, Set

# PHP source file extension (without the dot)
PHP_EXTENSION: str = "php"

# Declaration node types
FUNCTION_NODE: str = "function_definition"
CLASS_NODE: str = "class_declaration"
METHOD_NODE: str = "method_declaration"
PROPERTY_NODE: str = "property_declaration"
CONST_NODE: str = "const_declaration"
NAMESPACE_NODE: str = "namespace_definition"
NAMESPACE_USE_NODE: str = "namespace_use_declaration"

# Declarations whose bodies are not reflected
SKIPPED_DECLARATIONS: Set[str] = {
    "interface_declaration",
    "trait_declaration",
    "enum_declaration",
}

# Comment node type (includes //, #, /* */, /** */)
COMMENT_NODE: str = "comment"

# Call expression node types
FUNCTION_CALL_NODE: str = "function_call_expression"
METHOD_CALL_NODES: Set[str] = {
    "member_call_expression",
    "nullsafe_member_call_expression",
}
STATIC_CALL_NODE: str = "scoped_call_expression"

# Include expression node type -> exported include type
INCLUDE_TYPE_MAP: Dict[str, str] = {
    "include_expression": "Include",
    "include_once_expression": "Include Once",
    "require_expression": "Require",
    "require_once_expression": "Require Once",
}

# Parameter node types inside formal_parameters
PARAMETER_NODES: Set[str] = {
    "simple_parameter",
    "variadic_parameter",
    "property_promotion_parameter",
}

# Nodes whose children are statements; used to find the statement a call
# expression belongs to.
STATEMENT_CONTAINERS: Set[str] = {
    "program",
    "compound_statement",
    "declaration_list",
    "colon_block",
    "switch_block",
    "case_statement",
    "default_statement",
}

# String literal node types
STRING_NODES: Set[str] = {"string", "encapsed_string"}
STRING_CONTENT_NODES: Set[str] = {"string_content", "string_value", "escape_sequence"}

# Hook-firing functions -> hook type
HOOK_TYPE_MAP: Dict[str, str] = {
    "do_action": "action",
    "do_action_ref_array": "action_reference",
    "do_action_deprecated": "action_deprecated",
    "apply_filters": "filter",
    "apply_filters_ref_array": "filter_reference",
    "apply_filters_deprecated": "filter_deprecated",
}

# Functions that report use of deprecated code; their second argument is the
# version the code was deprecated in.
DEPRECATION_FUNCTIONS: Set[str] = {
    "_deprecated_file",
    "_deprecated_function",
    "_deprecated_argument",
    "_deprecated_hook",
}

# Function registering a global constant
DEFINE_FUNCTION: str = "define"

# Namespace name used for declarations outside any namespace
GLOBAL_NAMESPACE: str = "global"

# Default method/property visibility when no modifier is written
DEFAULT_VISIBILITY: str = "public"

# Call-kind keys of a scope's usage mapping
USES_FUNCTIONS: str = "functions"
USES_METHODS: str = "methods"
USES_HOOKS: str = "hooks"
