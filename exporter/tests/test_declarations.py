"""
Unit tests for exporter/declarations.py

Tests argument, property, function, method and class records.
"""

import unittest
from exporter.declarations import (
    export_arguments,
    export_classes,
    export_functions,
    export_methods,
    export_properties,
)
from exporter.uses import DeprecationPolicy
from reflection.docblock import DocBlock, Tag
from reflection.models import (
    ArgumentReflection,
    CallArgument,
    ClassReflection,
    FunctionCall,
    FunctionReflection,
    HookReflection,
    MethodReflection,
    PropertyReflection,
)

EMPTY_DOC = {"description": "", "long_description": "", "tags": []}


class TestExportArguments(unittest.TestCase):
    def test_arguments_in_order(self):
        arguments = [
            ArgumentReflection(name="$post"),
            ArgumentReflection(name="$update", default="false", type="bool"),
        ]
        self.assertEqual(
            export_arguments(arguments),
            [
                {"name": "$post", "default": None, "type": None},
                {"name": "$update", "default": "false", "type": "bool"},
            ],
        )

    def test_no_arguments(self):
        self.assertEqual(export_arguments([]), [])


class TestExportProperties(unittest.TestCase):
    def test_property_record(self):
        prop = PropertyReflection(name="$callbacks", line=5, end_line=5, default="array()")
        record = export_properties([prop])[0]
        self.assertEqual(
            record,
            {
                "name": "$callbacks",
                "line": 5,
                "end_line": 5,
                "default": "array()",
                "static": False,
                "visibility": "public",
                "doc": EMPTY_DOC,
            },
        )


class TestExportFunctions(unittest.TestCase):
    def test_function_without_calls(self):
        function = FunctionReflection(name="noop", line=1, end_line=2)
        record = export_functions([function])[0]
        self.assertEqual(
            list(record),
            ["name", "namespace", "aliases", "line", "end_line", "arguments", "doc"],
        )
        self.assertEqual(record["namespace"], "global")
        self.assertEqual(record["aliases"], {})
        self.assertEqual(record["doc"], EMPTY_DOC)

    def test_function_with_uses_and_hooks(self):
        hook = HookReflection(name="save_post", line=4, end_line=4, type="action", arguments=["$post_id"])
        function = FunctionReflection(
            name="wp_insert_post",
            line=1,
            end_line=9,
            namespace="WP",
            aliases={"Client": "Vendor\\Client"},
            doc=DocBlock(short_description="Inserts a post."),
            uses={
                "functions": [FunctionCall(name="do_action", line=4, end_line=4)],
                "hooks": [hook],
            },
        )
        record = export_functions([function])[0]
        self.assertEqual(record["namespace"], "WP")
        self.assertEqual(record["aliases"], {"Client": "Vendor\\Client"})
        self.assertEqual(record["uses"], {"functions": [{"name": "do_action", "line": 4, "end_line": 4}]})
        self.assertEqual(record["hooks"][0]["name"], "save_post")
        self.assertEqual(list(record)[-2:], ["uses", "hooks"])

    def test_hooks_only_scope_has_no_uses(self):
        hook = HookReflection(name="init", line=2, end_line=2, type="action")
        function = FunctionReflection(name="f", line=1, end_line=3, uses={"hooks": [hook]})
        record = export_functions([function])[0]
        self.assertNotIn("uses", record)
        self.assertEqual(len(record["hooks"]), 1)

    def test_deprecation_policy_is_forwarded(self):
        calls = [
            FunctionCall(name="wp_die", line=1, end_line=1),
            FunctionCall(
                name="_deprecated_function",
                line=2,
                end_line=2,
                arguments=[
                    CallArgument(text="__FUNCTION__"),
                    CallArgument(text="'2.1'", kind="string", value="2.1"),
                ],
            ),
        ]
        function = FunctionReflection(name="old", line=1, end_line=3, uses={"functions": calls})
        first = export_functions([function])[0]["uses"]["functions"]
        matching = export_functions([function], deprecation_policy=DeprecationPolicy.MATCHING_CALL)[0]["uses"]["functions"]
        self.assertEqual(first[0]["deprecation_version"], "2.1")
        self.assertEqual(matching[1]["deprecation_version"], "2.1")
        self.assertNotIn("deprecation_version", matching[0])


class TestExportMethods(unittest.TestCase):
    def test_method_flags(self):
        method = MethodReflection(
            name="instance",
            line=3,
            end_line=6,
            static=True,
            final=True,
            visibility="private",
        )
        record = export_methods([method])[0]
        self.assertTrue(record["static"])
        self.assertTrue(record["final"])
        self.assertFalse(record["abstract"])
        self.assertEqual(record["visibility"], "private")
        self.assertNotIn("uses", record)
        self.assertNotIn("hooks", record)


class TestExportClasses(unittest.TestCase):
    def test_class_record(self):
        cls = ClassReflection(
            name="WP_Hook",
            line=1,
            end_line=40,
            final=True,
            extends="\\WP_Base",
            implements=["\\Iterator"],
            properties=[PropertyReflection(name="$a", line=2, end_line=2)],
            methods=[MethodReflection(name="m", line=3, end_line=4)],
            doc=DocBlock(tags=[Tag(name="internal")]),
        )
        record = export_classes([cls])[0]
        self.assertEqual(
            list(record),
            [
                "name", "namespace", "line", "end_line", "final", "abstract",
                "extends", "implements", "properties", "methods", "doc",
            ],
        )
        self.assertEqual(record["extends"], "\\WP_Base")
        self.assertEqual(record["implements"], ["\\Iterator"])
        self.assertEqual(len(record["properties"]), 1)
        self.assertEqual(record["methods"][0]["name"], "m")
        self.assertEqual(record["doc"]["tags"], [{"name": "internal", "content": ""}])

    def test_declaration_order_preserved(self):
        classes = [ClassReflection(name=name, line=i, end_line=i) for i, name in enumerate("CAB", 1)]
        self.assertEqual([c["name"] for c in export_classes(classes)], ["C", "A", "B"])


if __name__ == "__main__":
    unittest.main()
