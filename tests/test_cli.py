"""
Tests for the command line interface.

The import session is replaced with mocks or wired to a recording
submitter so no test touches the network.
"""

import json
from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from feedbin_importer.cli import (
    EXIT_IMPORT_FAILED,
    EXIT_INPUT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_OK,
    CLIInterface,
    main,
)
from feedbin_importer.core.import_session import ImportSession
from feedbin_importer.utils.error_handler import RemoteRejectedError
from feedbin_importer.utils.report_generator import ReportGenerator
from tests.conftest import RecordingSubmitter


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every CLI test from an empty directory with no credentials set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FEEDBIN_EMAIL", raising=False)
    monkeypatch.delenv("FEEDBIN_PASSWORD", raising=False)
    with patch("feedbin_importer.cli.setup_logging"):
        yield


@pytest.fixture
def output():
    return StringIO()


@pytest.fixture
def cli(output):
    console = Console(file=output, width=200, color_system=None, force_terminal=False)
    return CLIInterface(reporter=ReportGenerator(console=console))


def patched_session(submitter):
    """Patch ImportSession.from_config to return a session around submitter."""
    session = ImportSession(submitter, inter_item_delay=0)
    return patch.object(ImportSession, "from_config", return_value=session)


class TestArguments:
    """Test parsing and validation."""

    def test_missing_input(self, cli, capsys):
        assert cli.run([]) == EXIT_INPUT_ERROR
        assert "Input file is required" in capsys.readouterr().err

    def test_nonexistent_input(self, cli, capsys):
        assert cli.run(["--input", "missing.csv"]) == EXIT_INPUT_ERROR
        assert "does not exist" in capsys.readouterr().err

    def test_invalid_delay(self, cli, sample_csv_file):
        assert cli.run(["--input", str(sample_csv_file), "--delay", "20"]) == EXIT_INPUT_ERROR

    def test_parse_defaults(self, cli):
        args = cli.parse_args(["--input", "x.csv"])

        assert args.limit == 20
        assert not args.preview
        assert args.mark_read_failure is None

    def test_create_config(self, cli, tmp_path):
        assert cli.run(["--create-config"]) == EXIT_OK
        assert (tmp_path / "feedbin_importer.toml").exists()

    def test_create_config_refuses_overwrite(self, cli, tmp_path):
        (tmp_path / "feedbin_importer.toml").write_text("", encoding="utf-8")

        assert cli.run(["--create-config"]) == EXIT_INPUT_ERROR

    def test_bad_config_file(self, cli, sample_csv_file, tmp_path, capsys):
        config = tmp_path / "bad.toml"
        config.write_text("[network]\ntimeout = 0\n", encoding="utf-8")

        assert cli.run(["--input", str(sample_csv_file), "--config", str(config)]) == EXIT_INPUT_ERROR
        assert "Configuration Validation Failed" in capsys.readouterr().err


class TestRunImport:
    """Test the import flow end to end against a recording submitter."""

    def test_preview_does_not_import(self, cli, output, sample_csv_file):
        with patch.object(ImportSession, "from_config") as from_config:
            assert cli.run(["--input", str(sample_csv_file), "--preview"]) == EXIT_OK

        from_config.assert_not_called()
        assert "3 Bookmarks Loaded" in output.getvalue()

    def test_invalid_csv_reports_error(self, cli, output, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("title,url\na,https://a.example\n", encoding="utf-8")

        assert cli.run(["--input", str(path)]) == EXIT_INPUT_ERROR
        assert "CSV is missing required headers" in output.getvalue()

    def test_import_with_env_credentials(self, cli, output, sample_csv_file, monkeypatch):
        monkeypatch.setenv("FEEDBIN_EMAIL", "reader@example.com")
        monkeypatch.setenv("FEEDBIN_PASSWORD", "secret")
        submitter = RecordingSubmitter()

        with patched_session(submitter):
            code = cli.run(["--input", str(sample_csv_file)])

        assert code == EXIT_OK
        assert len(submitter.calls) == 3
        assert submitter.closed
        assert "Import Completed" in output.getvalue()

    def test_import_with_prompt(self, cli, sample_csv_file):
        submitter = RecordingSubmitter()

        with patched_session(submitter), patch(
            "feedbin_importer.cli.Prompt.ask", side_effect=["reader@example.com", "secret"]
        ) as ask:
            code = cli.run(["--input", str(sample_csv_file)])

        assert code == EXIT_OK
        assert ask.call_count == 2
        assert ask.call_args.kwargs["password"] is True
        assert len(submitter.calls) == 3

    def test_prompt_retries_on_invalid_input(self, cli, output, sample_csv_file):
        submitter = RecordingSubmitter()
        answers = ["", "", "reader@example.com", "secret"]

        with patched_session(submitter), patch("feedbin_importer.cli.Prompt.ask", side_effect=answers):
            code = cli.run(["--input", str(sample_csv_file)])

        assert code == EXIT_OK
        assert "Email and password are required" in output.getvalue()

    def test_prompt_aborted(self, cli, sample_csv_file):
        submitter = RecordingSubmitter()

        with patched_session(submitter), patch(
            "feedbin_importer.cli.Prompt.ask", side_effect=KeyboardInterrupt
        ):
            code = cli.run(["--input", str(sample_csv_file)])

        assert code == EXIT_INTERRUPTED
        assert submitter.calls == []

    def test_failure_exit_code_and_json(self, cli, output, sample_csv_file, monkeypatch, capsys):
        monkeypatch.setenv("FEEDBIN_EMAIL", "reader@example.com")
        monkeypatch.setenv("FEEDBIN_PASSWORD", "secret")
        submitter = RecordingSubmitter(failures={1: RemoteRejectedError(401, "Unauthorized")})

        with patched_session(submitter):
            code = cli.run(["--input", str(sample_csv_file), "--json"])

        assert code == EXIT_IMPORT_FAILED
        assert "Stopped at item 2: Failed to import item: 401 Unauthorized" in output.getvalue()
        data = json.loads(capsys.readouterr().out)
        assert data["phase"] == "failed"
        assert data["cursor"] == 1
        assert len(data["succeeded"]) == 1

    def test_check_credentials_rejected(self, cli, output, sample_csv_file, monkeypatch):
        monkeypatch.setenv("FEEDBIN_EMAIL", "reader@example.com")
        monkeypatch.setenv("FEEDBIN_PASSWORD", "wrong")
        submitter = MagicMock()
        submitter.verify_credentials.return_value = False

        with patched_session(submitter):
            code = cli.run(["--input", str(sample_csv_file), "--check-credentials"])

        assert code == EXIT_INPUT_ERROR
        assert "rejected the credentials" in output.getvalue()
        submitter.submit_one.assert_not_called()

    def test_check_credentials_accepted(self, cli, output, sample_csv_file, monkeypatch):
        monkeypatch.setenv("FEEDBIN_EMAIL", "reader@example.com")
        monkeypatch.setenv("FEEDBIN_PASSWORD", "secret")
        submitter = RecordingSubmitter()
        submitter.verify_credentials = MagicMock(return_value=True)

        with patched_session(submitter):
            code = cli.run(["--input", str(sample_csv_file), "--check-credentials"])

        assert code == EXIT_OK
        assert "Credentials verified" in output.getvalue()
        assert len(submitter.calls) == 3


def test_main_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])

    assert exc_info.value.code == 0
    assert "feedbin-importer 1.0.0" in capsys.readouterr().out
