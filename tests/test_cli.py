"""
Tests for diawi_upload.cli module.

Tests the command handlers including:
- Exit codes per outcome
- Link output file
- Validation command
- Argument to settings mapping
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import requests_mock

from diawi_upload.cli import EXIT_ERROR, EXIT_OK, EXIT_TIMEOUT, main
from diawi_upload.exceptions import NetworkError
from diawi_upload.results import OutcomeKind, UploadOutcome

UPLOAD_URL = "https://upload.diawi.com/"
STATUS_URL = "https://upload.diawi.com/status"


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def _outcome(kind: OutcomeKind, file_path: Path, **kwargs) -> UploadOutcome:
    return UploadOutcome(kind=kind, file_path=file_path, **kwargs)


class TestUploadCommand:
    """Tests for 'diawi upload'."""

    def test_success_writes_output_file(self, ipa_file: Path, tmp_test_dir, capsys):
        outcome = _outcome(
            OutcomeKind.SUCCESS,
            ipa_file,
            link="https://i.diawi.com/abc",
            job_id="job-1",
            attempts=1,
        )
        output_file = tmp_test_dir / "out" / "link.txt"

        with patch("diawi_upload.cli.upload_to_diawi", return_value=outcome) as up:
            code = _run(
                [
                    "upload",
                    str(ipa_file),
                    "--token",
                    "tok",
                    "--comment",
                    "nightly",
                    "--no-wall-of-apps",
                    "--output-file",
                    str(output_file),
                ]
            )

        assert code == EXIT_OK
        assert output_file.read_text(encoding="utf-8") == "https://i.diawi.com/abc\n"
        assert "[SUCCESS] Uploaded to diawi: https://i.diawi.com/abc" in (
            capsys.readouterr().out
        )

        args, kwargs = up.call_args
        assert args[0] == Path(str(ipa_file))
        assert args[1] == "tok"
        assert args[2] == {"comment": "nightly", "wall_of_apps": False}
        assert kwargs["poll_interval"] == 2.0
        assert kwargs["max_attempts"] == 5

    def test_poll_settings_forwarded(self, ipa_file: Path):
        outcome = _outcome(OutcomeKind.SUCCESS, ipa_file, link="https://i.diawi.com/x")

        with patch("diawi_upload.cli.upload_to_diawi", return_value=outcome) as up:
            _run(
                [
                    "upload",
                    str(ipa_file),
                    "--token",
                    "tok",
                    "--poll-interval",
                    "0.5",
                    "--max-attempts",
                    "8",
                ]
            )

        _, kwargs = up.call_args
        assert kwargs["poll_interval"] == 0.5
        assert kwargs["max_attempts"] == 8

    def test_token_from_environment(self, ipa_file: Path, monkeypatch):
        monkeypatch.setenv("DIAWI_TOKEN", "env-tok")
        outcome = _outcome(OutcomeKind.SUCCESS, ipa_file, link="https://i.diawi.com/x")

        with patch("diawi_upload.cli.upload_to_diawi", return_value=outcome) as up:
            code = _run(["upload", str(ipa_file)])

        assert code == EXIT_OK
        assert up.call_args.args[1] == "env-tok"

    def test_timeout_exit_code(self, ipa_file: Path, tmp_test_dir, capsys):
        outcome = _outcome(
            OutcomeKind.POLL_TIMEOUT,
            ipa_file,
            job_id="job-1",
            attempts=5,
            message="'In progress' status after 5 checks",
            suggestion="If not, try to upload file by yourself",
        )
        output_file = tmp_test_dir / "link.txt"

        with patch("diawi_upload.cli.upload_to_diawi", return_value=outcome):
            code = _run(
                [
                    "upload",
                    str(ipa_file),
                    "--token",
                    "tok",
                    "--output-file",
                    str(output_file),
                ]
            )

        out = capsys.readouterr().out
        assert code == EXIT_TIMEOUT
        assert not output_file.exists()
        assert out.count("'In progress' status") == 1
        assert "[WARNING] diawi had not finished processing" in out

    @pytest.mark.parametrize(
        "kind",
        [
            OutcomeKind.UPLOAD_REJECTED,
            OutcomeKind.REMOTE_FAILURE,
            OutcomeKind.UNKNOWN_STATUS,
        ],
    )
    def test_failure_exit_code(self, kind, ipa_file: Path, capsys):
        outcome = _outcome(
            kind, ipa_file, message="Error uploading to diawi", suggestion="retry"
        )

        with patch("diawi_upload.cli.upload_to_diawi", return_value=outcome):
            code = _run(["upload", str(ipa_file), "--token", "tok"])

        out = capsys.readouterr().out
        assert code == EXIT_ERROR
        assert out.count("Error uploading to diawi") == 1
        assert "retry" not in out
        assert f"[FAILED] Upload to diawi did not succeed ({kind.value})." in out

    def test_failure_reported_once(self, ipa_file: Path, capsys):
        """Test that a remote failure reaches the user once, via the logger."""
        with requests_mock.Mocker() as m:
            m.post(UPLOAD_URL, json={"job": "job-1"})
            m.get(STATUS_URL, json={"status": 4000, "message": "bad binary"})
            code = _run(["upload", str(ipa_file), "--token", "tok"])

        captured = capsys.readouterr()
        combined = captured.out + captured.err
        assert code == EXIT_ERROR
        assert combined.count("bad binary") == 2  # logger warning + Message line
        assert combined.count("Try to upload file by yourself") == 1
        assert "bad binary" in captured.err

    @pytest.mark.parametrize("value", ["-1", "nan"])
    def test_invalid_poll_interval_rejected_before_upload(
        self, value, ipa_file: Path, capsys
    ):
        with patch("diawi_upload.cli.upload_to_diawi") as up:
            code = _run(
                [
                    "upload",
                    str(ipa_file),
                    "--token",
                    "tok",
                    f"--poll-interval={value}",
                ]
            )

        assert code == EXIT_ERROR
        up.assert_not_called()
        assert "Error: poll_interval" in capsys.readouterr().out

    def test_unwritable_output_file_reported(
        self, ipa_file: Path, tmp_test_dir: Path, capsys
    ):
        outcome = _outcome(
            OutcomeKind.SUCCESS, ipa_file, link="https://i.diawi.com/abc"
        )
        directory = tmp_test_dir / "existing-dir"
        directory.mkdir()

        with patch("diawi_upload.cli.upload_to_diawi", return_value=outcome):
            code = _run(
                [
                    "upload",
                    str(ipa_file),
                    "--token",
                    "tok",
                    "--output-file",
                    str(directory),
                ]
            )

        out = capsys.readouterr().out
        assert code == EXIT_ERROR
        assert "[SUCCESS] Uploaded to diawi: https://i.diawi.com/abc" in out
        assert f"[FAILED] Could not write link to {directory}" in out
        assert "Error:" in out

    def test_invalid_settings_do_not_upload(self, tmp_test_dir: Path, capsys):
        missing = tmp_test_dir / "missing.ipa"

        with patch("diawi_upload.cli.upload_to_diawi") as up:
            code = _run(["upload", str(missing), "--token", "tok"])

        assert code == EXIT_ERROR
        up.assert_not_called()
        assert "Couldn't find file" in capsys.readouterr().out

    def test_network_error_reported(self, ipa_file: Path, capsys):
        with patch(
            "diawi_upload.cli.upload_to_diawi",
            side_effect=NetworkError("upload to diawi failed: down"),
        ):
            code = _run(["upload", str(ipa_file), "--token", "tok"])

        assert code == EXIT_ERROR
        assert "Error: upload to diawi failed: down" in capsys.readouterr().out

    def test_config_error_reported(self, tmp_test_dir: Path, capsys):
        code = _run(
            ["upload", "--config", str(tmp_test_dir / "absent.yaml"), "--token", "t"]
        )

        assert code == EXIT_ERROR
        assert "Error:" in capsys.readouterr().out


class TestValidateCommand:
    """Tests for 'diawi validate'."""

    def test_valid(self, ipa_file: Path, capsys):
        code = _run(["validate", str(ipa_file), "--token", "tok"])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "VALIDATION RESULTS" in out
        assert "[SUCCESS] Settings are valid!" in out

    def test_invalid(self, capsys):
        code = _run(["validate", "--callback-url", "nope"])

        out = capsys.readouterr().out
        assert code == EXIT_ERROR
        assert "Missing required setting: token" in out
        assert "callback_url" in out
        assert "[FAILED] Validation failed with 3 error(s)." in out

    def test_command_required(self):
        assert _run([]) == 2
