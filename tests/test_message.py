"""Tests for consolidated commit messages."""

from backport_bot.backport import compose_message, format_commit
from backport_bot.models import CommitRecord, Signature

from conftest import make_commit


class TestComposeMessage:
    """Tests for compose_message."""

    def test_single_commit_block(self):
        """Given one commit, should emit a numbered block with sha and signatures."""
        # Given
        commits = [make_commit()]

        # When
        message = compose_message(commits)

        # Then
        assert message == (
            "[Commit 1]\n"
            "Fix bug\n\n"
            "Original sha: abc123\n"
            "Authored by A <a@x.com> on 2020-01-01\n"
            "Committed by A <a@x.com> on 2020-01-01"
        )

    def test_blocks_keep_original_order(self):
        """Given three commits, should number them 1..3 in PR order."""
        # Given
        commits = [
            make_commit(sha="aaa", message="First"),
            make_commit(sha="bbb", message="Second"),
            make_commit(sha="ccc", message="Third"),
        ]

        # When
        message = compose_message(commits)

        # Then
        positions = [message.index(f"[Commit {n}]") for n in (1, 2, 3)]
        assert positions == sorted(positions)
        assert message.index("Original sha: aaa") < message.index("Original sha: bbb") < message.index("Original sha: ccc")

    def test_blocks_separated_by_blank_line(self):
        """Given two commits, should separate blocks with one blank line."""
        # When
        message = compose_message([make_commit(sha="aaa"), make_commit(sha="bbb")])

        # Then
        assert "on 2020-01-01\n\n[Commit 2]" in message

    def test_author_and_committer_kept_verbatim(self):
        """Given distinct author and committer, should report both as given."""
        # Given
        commit = CommitRecord(
            sha="abc123",
            message="Tweak",
            author=Signature(name="A", email="a@x.com", date="2020-01-01"),
            committer=Signature(name="Bot", email="bot@ci", date="2020-02-02T10:00:00Z"),
        )

        # When
        block = format_commit(3, commit)

        # Then
        assert block.startswith("[Commit 3]\nTweak\n")
        assert "Authored by A <a@x.com> on 2020-01-01" in block
        assert "Committed by Bot <bot@ci> on 2020-02-02T10:00:00Z" in block

    def test_no_commits_gives_empty_message(self):
        assert compose_message([]) == ""
