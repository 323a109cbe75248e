import unittest
from pathlib import Path
from unittest.mock import MagicMock

from vc_changelog.vcs.git_client import GitClient
from vc_changelog.vcs.history import NoReleaseWindowError, ReleaseWindow, read_history, select_window
from vc_changelog.vcs.models import Tag
from vc_changelog.vcs.parsers import HistoryError, InsufficientTagHistoryError


TAGS = [
    Tag(name="v1.3.0", date="2018-01-10T10:00:00+01:00"),
    Tag(name="v1.2.1", date="2018-01-05T09:00:00+01:00"),
    Tag(name="v1.2.0", date="2017-12-23T14:38:07+01:00"),
]


class TestSelectWindow(unittest.TestCase):
    def test_default_is_two_newest(self) -> None:
        self.assertEqual(select_window(TAGS), ReleaseWindow(newer=TAGS[0], older=TAGS[1]))

    def test_target_pairs_with_next_older(self) -> None:
        self.assertEqual(select_window(TAGS, "v1.2.1"), ReleaseWindow(newer=TAGS[1], older=TAGS[2]))

    def test_oldest_target_has_no_window(self) -> None:
        self.assertIsNone(select_window(TAGS, "v1.2.0"))

    def test_unknown_target_has_no_window(self) -> None:
        self.assertIsNone(select_window(TAGS, "v9.9.9"))

    def test_single_tag_has_no_window(self) -> None:
        self.assertIsNone(select_window(TAGS[:1]))


def make_client(tag_listing: str, commit_listing: str = "") -> MagicMock:
    client = MagicMock(spec=GitClient)
    client.repo_root = Path("/repo")
    client.get_tag_listing.return_value = tag_listing
    client.get_commit_listing.return_value = commit_listing
    return client


class TestReadHistory(unittest.TestCase):
    tag_listing = (
        "2018-01-10T10:00:00+01:00 HEAD -> main, tag: v1.3.0\n"
        "2017-12-23T14:38:07+01:00 tag: v1.2.0\n"
    )
    commit_listing = (
        "72d9d941d 2018-01-09T19:32:20+01:00 Fix #10 - crash on load\n"
        "a1b2c3d4e 2018-01-08T10:00:00+01:00 Hotfix - typo in footer\n"
        "0f0f0f0f0 2018-01-07T10:00:00+01:00 Merge branch x\n"
    )

    def test_reads_commits_between_newest_tags(self) -> None:
        client = make_client(self.tag_listing, self.commit_listing)
        history = read_history(client, tag_pattern=r"v\d+\.\d+\.\d+")

        client.get_tag_listing.assert_called_once_with(count=20)
        client.get_commit_listing.assert_called_once_with("v1.2.0", "v1.3.0")
        self.assertEqual(history.newer.name, "v1.3.0")
        self.assertEqual(history.older.name, "v1.2.0")
        self.assertEqual(len(history.commits), 3)
        self.assertEqual(history.commits[0].issues, ("10",))

    def test_insufficient_tags(self) -> None:
        client = make_client("2018-01-10T10:00:00+01:00 tag: v1.3.0\n")
        with self.assertRaises(InsufficientTagHistoryError):
            read_history(client)
        client.get_commit_listing.assert_not_called()

    def test_no_window_for_oldest_tag(self) -> None:
        client = make_client(self.tag_listing)
        with self.assertRaises(NoReleaseWindowError) as ctx:
            read_history(client, tag="v1.2.0")
        self.assertIn("v1.2.0", str(ctx.exception))
        self.assertIsInstance(ctx.exception, HistoryError)
        client.get_commit_listing.assert_not_called()


if __name__ == "__main__":
    unittest.main()
