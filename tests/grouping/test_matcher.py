import re
import unittest

from vc_changelog.grouping.matcher import LabelRule, LiteralMatcher, PatternMatcher, make_matcher


class TestMatchers(unittest.TestCase):
    def test_literal_substring(self) -> None:
        matcher = LiteralMatcher("Hotfix - ")
        self.assertTrue(matcher.matches("Hotfix - typo in footer"))
        self.assertTrue(matcher.matches("Urgent Hotfix - typo"))
        self.assertFalse(matcher.matches("hotfix typo"))
        self.assertEqual(matcher.strip("Hotfix - typo in footer"), "typo in footer")

    def test_literal_strip_first_occurrence_only(self) -> None:
        self.assertEqual(LiteralMatcher("x").strip("x-x-x"), "-x-x")

    def test_literal_label_is_exact(self) -> None:
        matcher = LiteralMatcher("Bug")
        self.assertTrue(matcher.matches_label({"Bug", "UI"}))
        self.assertFalse(matcher.matches_label({"Bugfix"}))

    def test_pattern(self) -> None:
        matcher = PatternMatcher(re.compile(r"Hotfix [-~]? ?"))
        self.assertTrue(matcher.matches("Hotfix ~ spacing"))
        self.assertEqual(matcher.strip("Hotfix ~ spacing"), "spacing")
        self.assertTrue(matcher.matches_label({"Hotfix label"}))

    def test_make_matcher(self) -> None:
        self.assertEqual(make_matcher("Bug"), LiteralMatcher("Bug"))
        self.assertIsInstance(make_matcher(re.compile("a")), PatternMatcher)
        self.assertEqual(make_matcher({"regex": "^Fix"}).pattern.pattern, "^Fix")
        literal = LiteralMatcher("x")
        self.assertIs(make_matcher(literal), literal)

    def test_make_matcher_rejects_bad_values(self) -> None:
        for value in (42, {"regex": "("}, {"regex": "a", "flags": 1}, None):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    make_matcher(value)

    def test_label_rule_from_config(self) -> None:
        rule = LabelRule.from_config({"match": "Feature", "name": "Features"})
        self.assertEqual(rule, LabelRule(match=LiteralMatcher("Feature"), name="Features"))


if __name__ == "__main__":
    unittest.main()
