"""Tests for the command-line entry point."""

import pytest

from backport_bot import main as cli
from backport_bot.errors import NotMerged


class TestMain:
    """Tests for main()."""

    def test_backport_prints_report(self, monkeypatch, capsys, make_run):
        """Given a successful run, should print the report and exit 0."""
        # Given
        seen = {}

        async def fake_run_backport(config, ref, targets):
            seen.update(ref=ref, targets=targets, config=config)
            return make_run(targets)

        monkeypatch.setenv("GITHUB_TOKEN", "tok")
        monkeypatch.setattr(cli, "run_backport", fake_run_backport)

        # When
        with pytest.raises(SystemExit) as excinfo:
            cli.main([
                "backport", "https://github.com/acme/widgets/pull/42",
                "release-1.0", "release-2.0", "--on-existing-branch", "overwrite",
            ])

        # Then
        assert excinfo.value.code == 0
        assert "Backported pull request #42 to release-1.0, release-2.0" in capsys.readouterr().out
        assert seen["ref"].number == 42
        assert seen["targets"] == ["release-1.0", "release-2.0"]
        assert seen["config"].overwrite_existing is True

    def test_chat_command_form(self, monkeypatch, capsys, make_run):
        """Given the chat form, should parse URL and branches the same way."""
        # Given
        async def fake_run_backport(config, ref, targets):
            return make_run(targets)

        monkeypatch.setattr(cli, "run_backport", fake_run_backport)

        # When
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["command", "backport https://github.com/acme/widgets/pull/42 release-1.0"])

        # Then
        assert excinfo.value.code == 0
        assert "Backported pull request #42 to release-1.0" in capsys.readouterr().out

    def test_failed_run_exits_nonzero(self, monkeypatch):
        """Given a validation failure, should exit 1 without a report."""
        # Given
        async def fake_run_backport(config, ref, targets):
            raise NotMerged("Cannot backport unmerged pull request #42")

        monkeypatch.setattr(cli, "run_backport", fake_run_backport)

        # When
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["backport", "https://github.com/acme/widgets/pull/42", "release-1.0"])

        # Then
        assert excinfo.value.code == 1

    def test_bad_url_exits_nonzero(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["backport", "https://example.com/not-a-pr", "release-1.0"])
        assert excinfo.value.code == 1
