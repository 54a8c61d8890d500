"""
Tree-sitter parser initialization and file parsing utilities.

This module provides functions to initialize the PHP parser and parse source files.
"""

import logging
from typing import Tuple
import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser, Tree

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant (PHP with embedded HTML text)
PHP_LANGUAGE = Language(tsphp.language_php())


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for PHP.

    Returns:
        A Parser instance configured with the PHP language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"<?php function foo() {}")
    """
    parser = Parser(PHP_LANGUAGE)
    logger.debug("Created tree-sitter PHP parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of PHP source code.

    Args:
        source: UTF-8 encoded bytes of PHP source code, including the
            opening ``<?php`` tag.

    Returns:
        A Tree object representing the parsed AST.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"<?php function foo() {}")
        >>> tree.root_node.type
        'program'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.warning("Parsed tree contains syntax errors")

    logger.debug(f"Parsed {len(source)} bytes of PHP code")
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a PHP source file from disk.

    Args:
        file_path: Path to the .php file.

    Returns:
        A tuple of (Tree, source_bytes) where:
        - Tree is the parsed AST
        - source_bytes is the raw file content as bytes

    Raises:
        FileNotFoundError: If the file does not exist.
        IOError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except IOError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    tree = parse_bytes(source_bytes)

    if tree.root_node.has_error:
        logger.warning(f"File {file_path} contains syntax errors")

    logger.debug(f"Successfully parsed file: {file_path}")
    return tree, source_bytes


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and missing nodes in a parsed tree."""
    count = 0
    stack: list[Node] = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            count += 1
        stack.extend(node.children)
    return count
