"""
Integration tests for exporter/pipeline.py

Tests file record assembly, path normalization, fault isolation and the
end-to-end directory export.
"""

import json
import os
import unittest
from pathlib import Path
from exporter.pipeline import (
    ExportStats,
    export_directory,
    export_file,
    iter_parse_files,
    parse_files,
)
from exporter.uses import DeprecationPolicy
from reflection.docblock import DocBlock, VersionTag
from reflection.models import (
    ClassReflection,
    ConstantReflection,
    FileReflection,
    FunctionCall,
    FunctionReflection,
    HookReflection,
    IncludeReflection,
    MethodReflection,
    PropertyReflection,
)

FIXTURES = Path(__file__).resolve().parents[2] / "reflection" / "tests" / "fixtures"
EMPTY_DOC = {"description": "", "long_description": "", "tags": []}


def synthetic_reflection(path="/pkg/wp-includes/plugin.php"):
    """Two functions (one with @since 2.0), one class with a property and a method."""
    return FileReflection(
        path=path,
        functions=[
            FunctionReflection(
                name="documented",
                line=3,
                end_line=5,
                doc=DocBlock(
                    short_description="Documented.",
                    tags=[VersionTag(name="since", version="2.0")],
                ),
            ),
            FunctionReflection(name="undocumented", line=7, end_line=8),
        ],
        classes=[
            ClassReflection(
                name="Registry",
                line=10,
                end_line=20,
                properties=[PropertyReflection(name="$items", line=11, end_line=11, visibility="public")],
                methods=[
                    MethodReflection(
                        name="instance",
                        line=13,
                        end_line=19,
                        static=True,
                        visibility="private",
                    )
                ],
            )
        ],
    )


class TestExportStats(unittest.TestCase):
    """Test ExportStats class."""

    def test_creation(self):
        stats = ExportStats()
        self.assertEqual(stats.files_processed, 0)
        self.assertEqual(stats.files_failed, 0)
        self.assertEqual(stats.failed_files, [])

    def test_to_dict(self):
        stats = ExportStats()
        stats.files_processed = 5
        stats.record_failure("/pkg/bad.php")

        result = stats.to_dict()
        self.assertEqual(result["files_processed"], 5)
        self.assertEqual(result["files_failed"], 1)
        self.assertEqual(result["failed_files"], ["/pkg/bad.php"])

    def test_str_representation(self):
        stats = ExportStats()
        stats.files_processed = 3
        self.assertIn("processed=3", str(stats))


class TestExportFile(unittest.TestCase):
    """Test assembling a single FileRecord."""

    def test_round_trip_synthetic_tree(self):
        record = export_file(synthetic_reflection(), path="wp-includes/plugin.php", root="/pkg")

        self.assertEqual(record["functions"][0]["doc"]["tags"][0], {"name": "since", "content": "2.0"})
        self.assertEqual(record["functions"][1]["doc"], EMPTY_DOC)
        self.assertEqual(record["classes"][0]["properties"][0]["visibility"], "public")
        self.assertTrue(record["classes"][0]["methods"][0]["static"])

    def test_optional_keys_omitted(self):
        record = export_file(synthetic_reflection(), path="a.php", root="/pkg")
        self.assertEqual(list(record), ["doc", "path", "root", "version", "functions", "classes"])
        self.assertEqual(record["doc"], EMPTY_DOC)
        self.assertIsNone(record["version"])

    def test_empty_file_still_has_functions_and_classes(self):
        record = export_file(FileReflection(path="/pkg/empty.php"), path="empty.php", root="/pkg")
        self.assertEqual(record["functions"], [])
        self.assertEqual(record["classes"], [])

    def test_optional_keys_in_order(self):
        reflection = FileReflection(
            path="/pkg/load.php",
            includes=[IncludeReflection(name="'wp-load.php'", line=2, type="Require Once")],
            constants=[ConstantReflection(name="WPINC", line=3, value="'wp-includes'")],
            uses={
                "functions": [FunctionCall(name="do_action", line=4, end_line=4)],
                "hooks": [HookReflection(name="init", line=4, end_line=4, type="action")],
            },
        )
        record = export_file(reflection, path="load.php", root="/pkg", version="4.9")
        self.assertEqual(
            list(record),
            ["doc", "path", "root", "version", "uses", "includes", "constants", "hooks", "functions", "classes"],
        )
        self.assertEqual(record["includes"], [{"name": "'wp-load.php'", "line": 2, "type": "Require Once"}])
        self.assertEqual(record["constants"], [{"name": "WPINC", "line": 3, "value": "'wp-includes'"}])
        self.assertEqual(record["hooks"][0]["name"], "init")
        self.assertEqual(record["version"], "4.9")

    def test_idempotent(self):
        reflection = synthetic_reflection()
        first = json.dumps(export_file(reflection, path="a.php", root="/pkg"))
        second = json.dumps(export_file(reflection, path="a.php", root="/pkg"))
        self.assertEqual(first, second)


class TestParseFiles(unittest.TestCase):
    """Test the per-file loop with an injected reflection function."""

    def test_version_mode(self):
        records = parse_files(
            ["/pkg/4.9/wp-admin/load.php"],
            "/pkg",
            use_versions=True,
            reflect=synthetic_reflection,
        )
        self.assertEqual(records[0]["version"], "4.9")
        self.assertEqual(records[0]["path"], "wp-admin/load.php")
        self.assertEqual(records[0]["root"], os.path.join("/pkg", "4.9"))

    def test_without_version_mode(self):
        records = parse_files(["/pkg/4.9/wp-admin/load.php"], "/pkg", reflect=synthetic_reflection)
        self.assertEqual(records[0]["path"], "4.9/wp-admin/load.php")
        self.assertEqual(records[0]["root"], "/pkg")
        self.assertIsNone(records[0]["version"])

    def test_input_order_preserved(self):
        files = ["/pkg/b.php", "/pkg/a.php"]
        records = parse_files(files, "/pkg", reflect=synthetic_reflection)
        self.assertEqual([r["path"] for r in records], ["b.php", "a.php"])

    def test_failing_file_is_skipped_and_reported(self):
        def reflect(path):
            if path.endswith("bad.php"):
                raise ValueError("cannot reflect")
            return synthetic_reflection(path)

        stats = ExportStats()
        records = parse_files(["/pkg/a.php", "/pkg/bad.php", "/pkg/c.php"], "/pkg", reflect=reflect, stats=stats)

        self.assertEqual([r["path"] for r in records], ["a.php", "c.php"])
        self.assertEqual(stats.files_processed, 2)
        self.assertEqual(stats.files_failed, 1)
        self.assertEqual(stats.failed_files, ["/pkg/bad.php"])
        self.assertEqual(stats.functions_exported, 4)
        self.assertEqual(stats.classes_exported, 2)

    def test_fail_fast_reraises(self):
        def reflect(path):
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            parse_files(["/pkg/a.php"], "/pkg", reflect=reflect, continue_on_error=False)

    def test_iter_parse_files_is_lazy(self):
        seen = []

        def reflect(path):
            seen.append(path)
            return synthetic_reflection(path)

        iterator = iter_parse_files(["/pkg/a.php", "/pkg/b.php"], "/pkg", reflect=reflect)
        next(iterator)
        self.assertEqual(seen, ["/pkg/a.php"])


class TestExportDirectory(unittest.TestCase):
    """End-to-end export of the reflection fixtures."""

    @classmethod
    def setUpClass(cls):
        cls.records, cls.stats = export_directory(str(FIXTURES))
        cls.by_path = {record["path"]: record for record in cls.records}

    def test_all_files_exported(self):
        self.assertEqual([r["path"] for r in self.records], ["broken.php", "namespaced.php", "plugin.php"])
        self.assertEqual(self.stats.files_processed, 3)
        self.assertEqual(self.stats.files_failed, 0)
        self.assertGreater(self.stats.parse_errors, 0)

    def test_root_is_absolute_directory(self):
        self.assertEqual(self.by_path["plugin.php"]["root"], str(FIXTURES))

    def test_plugin_record_layout(self):
        record = self.by_path["plugin.php"]
        self.assertEqual(
            list(record),
            ["doc", "path", "root", "version", "uses", "includes", "constants", "hooks", "functions", "classes"],
        )
        self.assertEqual(record["doc"]["description"], "Plugin API: core hook functions.")
        self.assertEqual(record["hooks"][0]["name"], "plugins_api_loaded")
        self.assertEqual(
            record["hooks"][0]["doc"]["tags"],
            [{"name": "since", "content": "2.0"}],
        )

    def test_deprecation_version_exported(self):
        function = self.by_path["plugin.php"]["functions"][0]
        calls = function["uses"]["functions"]
        self.assertEqual(calls[0]["name"], "_deprecated_function")
        self.assertEqual(calls[0]["deprecation_version"], "3.0.0")
        self.assertEqual(function["hooks"][0]["name"], "edit_{$hook_name}_form")

    def test_namespaced_record_has_no_optional_keys(self):
        record = self.by_path["namespaced.php"]
        self.assertEqual(list(record), ["doc", "path", "root", "version", "functions", "classes"])
        self.assertEqual(record["classes"][0]["extends"], "\\Other\\Thing")

    def test_records_are_json_serializable(self):
        text = json.dumps(self.records)
        self.assertIn("WP_Hook", text)

    def test_matching_call_policy(self):
        records, _ = export_directory(
            str(FIXTURES),
            include="plugin",
            deprecation_policy=DeprecationPolicy.MATCHING_CALL,
        )
        calls = records[0]["functions"][0]["uses"]["functions"]
        self.assertEqual(calls[0]["deprecation_version"], "3.0.0")


if __name__ == "__main__":
    unittest.main()
