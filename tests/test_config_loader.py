import json
import tempfile
import unittest
from pathlib import Path

from vc_changelog.config.loader import ConfigError, load_config, merge_settings
from vc_changelog.grouping.matcher import LiteralMatcher, PatternMatcher
from vc_changelog.render.markdown import MarkdownRenderer


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.repo = Path(tmp.name)
        (self.repo / ".git").mkdir()

    def write_config(self, data) -> Path:
        path = self.repo / "changelog.json"
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return path

    def test_defaults(self) -> None:
        config = load_config(None, {"dir": str(self.repo), "upstream": "owner/repo"})
        self.assertEqual(config.dir, self.repo.resolve())
        self.assertEqual((config.owner, config.repo), ("owner", "repo"))
        self.assertIsNone(config.token)
        self.assertEqual([r.name for r in config.external_labels], ["Features", "Bugs"])
        self.assertEqual([r.name for r in config.local_labels], ["Others"])
        self.assertIsInstance(config.local_labels[0].match, PatternMatcher)
        self.assertEqual(config.issue_pattern.pattern, r"(Fix|Close|Resolve) #(\d+)")
        self.assertEqual(config.bump, "patch")
        self.assertEqual(config.verbosity, 3)
        self.assertIsInstance(config.renderer, MarkdownRenderer)

    def test_file_and_overrides(self) -> None:
        path = self.write_config(
            {
                "upstream": "file/repo",
                "tag": "v1.0.0",
                "labels": {"external": [{"match": "Enhancement", "name": "Improvements"}]},
            }
        )
        config = load_config(path, {"dir": str(self.repo), "tag": "v2.0.0", "token": None})
        self.assertEqual(config.owner, "file")
        self.assertEqual(config.tag, "v2.0.0")
        self.assertEqual(config.external_labels[0].match, LiteralMatcher("Enhancement"))
        # local rules keep their default
        self.assertEqual([r.name for r in config.local_labels], ["Others"])

    def test_missing_file(self) -> None:
        with self.assertRaises(ConfigError):
            load_config(self.repo / "missing.json", {"dir": str(self.repo), "upstream": "o/r"})

    def test_invalid_json(self) -> None:
        path = self.write_config("{invalid}")
        with self.assertRaises(ConfigError):
            load_config(path, {"dir": str(self.repo), "upstream": "o/r"})

    def test_invalid_settings(self) -> None:
        base = {"dir": str(self.repo), "upstream": "o/r"}
        cases = [
            {"upstream": "no-slash"},
            {"upstream": "a/b/c"},
            {"unknown": True},
            {"verbosity": 7},
            {"bump": "build"},
            {"tag_pattern": "("},
            {"issue_pattern": r"#(\d+)"},
            {"labels": {"external": [{"match": "Bug"}]}},
            {"labels": {"local": [{"match": {"regex": "["}, "name": "Others"}]}},
            {"labels": {"other": []}},
            {"renderer": "no_such_module_xyz:Renderer"},
            {"token": 123},
        ]
        for override in cases:
            with self.subTest(override=override):
                with self.assertRaises(ConfigError):
                    load_config(None, {**base, **override})

    def test_not_a_git_repo(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_config(None, {"dir": tmp, "upstream": "o/r"})

    def test_merge_ignores_none(self) -> None:
        merged = merge_settings({"tag": "v1.0.0"}, {"tag": None})
        self.assertEqual(merged["tag"], "v1.0.0")


if __name__ == "__main__":
    unittest.main()
