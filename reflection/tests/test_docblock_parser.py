"""
Unit tests for docblock.py

Tests docblock detection, cleaning, description splitting and tag parsing.
"""

import unittest
from reflection.docblock import (
    LinkTag,
    ReferenceTag,
    Tag,
    TypedTag,
    VariableTag,
    VersionTag,
    clean_docblock,
    is_docblock,
    parse_docblock,
    parse_tag,
)


SAMPLE = """/**
 * Retrieves the name of a hook.
 *
 * The long description spans
 * two lines.
 *
 * @since 2.0
 * @param string $hook_name The hook name,
 *                          possibly dynamic.
 * @return bool|WP_Error Whether the hook exists.
 */"""


class TestDocblockDetection(unittest.TestCase):
    """Test docblock comment detection."""

    def test_double_star(self):
        self.assertTrue(is_docblock("/** Summary. */"))

    def test_multiline(self):
        self.assertTrue(is_docblock(SAMPLE))

    def test_regular_block(self):
        """Test that /* is NOT a docblock."""
        self.assertFalse(is_docblock("/* Regular block comment */"))

    def test_line_comment(self):
        self.assertFalse(is_docblock("// Line comment"))

    def test_no_space_after_opener(self):
        self.assertFalse(is_docblock("/**Summary*/"))


class TestCleanDocblock(unittest.TestCase):
    """Test stripping delimiters and asterisks."""

    def test_strips_asterisks(self):
        lines = clean_docblock("/**\n * First.\n *\n * Second.\n */")
        self.assertEqual(lines, ["First.", "", "Second."])

    def test_keeps_code_indentation(self):
        lines = clean_docblock("/**\n * Example:\n *     $x = 1;\n */")
        self.assertEqual(lines[1], "    $x = 1;")


class TestParseDocblock(unittest.TestCase):
    """Test splitting a docblock into descriptions and tags."""

    def setUp(self):
        self.doc = parse_docblock(SAMPLE)

    def test_short_description(self):
        self.assertEqual(self.doc.short_description, "Retrieves the name of a hook.")

    def test_long_description(self):
        self.assertEqual(self.doc.long_description, "The long description spans\ntwo lines.")

    def test_tags_in_order(self):
        self.assertEqual([tag.name for tag in self.doc.tags], ["since", "param", "return"])

    def test_multiline_tag_description(self):
        param = self.doc.get_tags("param")[0]
        self.assertEqual(param.description, "The hook name,\npossibly dynamic.")

    def test_has_tag(self):
        self.assertTrue(self.doc.has_tag("since"))
        self.assertFalse(self.doc.has_tag("deprecated"))

    def test_short_description_ends_at_blank_line(self):
        doc = parse_docblock("/**\n * Summary without\n * a full stop\n *\n * Body.\n */")
        self.assertEqual(doc.short_description, "Summary without\na full stop")
        self.assertEqual(doc.long_description, "Body.")

    def test_empty_docblock(self):
        doc = parse_docblock("/** */")
        self.assertEqual(doc.short_description, "")
        self.assertEqual(doc.long_description, "")
        self.assertEqual(doc.tags, [])


class TestParseTag(unittest.TestCase):
    """Test parsing individual tags into their variants."""

    def test_param_tag(self):
        tag = parse_tag("@param string|null $name The name.")
        self.assertIsInstance(tag, VariableTag)
        self.assertEqual(tag.types, ["string", "null"])
        self.assertEqual(tag.variable, "$name")
        self.assertEqual(tag.description, "The name.")

    def test_param_without_type(self):
        tag = parse_tag("@param $name The name.")
        self.assertEqual(tag.types, [])
        self.assertEqual(tag.variable, "$name")

    def test_variadic_param(self):
        tag = parse_tag("@param mixed ...$args Extra arguments.")
        self.assertEqual(tag.variable, "...$args")

    def test_var_without_variable(self):
        tag = parse_tag("@var array")
        self.assertIsInstance(tag, VariableTag)
        self.assertEqual(tag.types, ["array"])
        self.assertEqual(tag.variable, "")
        self.assertEqual(tag.description, "")

    def test_return_tag(self):
        tag = parse_tag("@return bool|WP_Error Result.")
        self.assertIsInstance(tag, TypedTag)
        self.assertNotIsInstance(tag, VariableTag)
        self.assertEqual(tag.types, ["bool", "WP_Error"])
        self.assertEqual(tag.description, "Result.")

    def test_link_tag_with_description(self):
        tag = parse_tag("@link https://developer.wordpress.org/ Handbook")
        self.assertIsInstance(tag, LinkTag)
        self.assertEqual(tag.link, "https://developer.wordpress.org/")
        self.assertEqual(tag.description, "Handbook")

    def test_link_tag_without_description(self):
        tag = parse_tag("@link https://developer.wordpress.org/")
        self.assertEqual(tag.description, "https://developer.wordpress.org/")

    def test_see_tag(self):
        tag = parse_tag("@see WP_Hook::add_filter() For details.")
        self.assertIsInstance(tag, ReferenceTag)
        self.assertEqual(tag.reference, "WP_Hook::add_filter()")
        self.assertEqual(tag.description, "For details.")

    def test_since_tag(self):
        tag = parse_tag("@since 4.7.0")
        self.assertIsInstance(tag, VersionTag)
        self.assertEqual(tag.version, "4.7.0")
        self.assertEqual(tag.description, "")

    def test_deprecated_with_description(self):
        tag = parse_tag("@deprecated 3.0.0 Use apply_filters()")
        self.assertEqual(tag.version, "3.0.0")
        self.assertEqual(tag.description, "Use apply_filters()")

    def test_version_without_vector(self):
        tag = parse_tag("@since MU (3.0.0)")
        self.assertEqual(tag.version, "")
        self.assertEqual(tag.description, "MU (3.0.0)")

    def test_vcs_version(self):
        tag = parse_tag("@version svn: $Id: plugin.php 1234 $")
        self.assertEqual(tag.version, "svn: $Id: plugin.php 1234 $")

    def test_generic_tag(self):
        tag = parse_tag("@global wpdb $wpdb WordPress database object.")
        self.assertIs(type(tag), Tag)
        self.assertEqual(tag.description, "wpdb $wpdb WordPress database object.")

    def test_not_a_tag(self):
        self.assertIsNone(parse_tag("plain text"))


if __name__ == "__main__":
    unittest.main()
