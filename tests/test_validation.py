"""
Tests for settings validation module.

This module tests the validation that checks upload settings without making
network calls.
"""

from __future__ import annotations

from pathlib import Path

from diawi_upload.validation import validate_settings


class TestValidateSettings:
    """Tests for validate_settings function."""

    def test_valid_minimal(self, ipa_file: Path):
        result = validate_settings({"token": "tok", "file": str(ipa_file)})

        assert result.status == "valid"
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_missing_token_and_file(self):
        result = validate_settings({})

        assert result.status == "invalid"
        assert "Missing required setting: token" in result.errors
        assert "Missing required setting: file" in result.errors

    def test_file_not_found(self, tmp_test_dir: Path):
        missing = tmp_test_dir / "missing.ipa"
        result = validate_settings({"token": "tok", "file": str(missing)})

        assert not result.valid
        assert any("Couldn't find file" in e for e in result.errors)

    def test_unsupported_extension_warns(self, tmp_test_dir: Path):
        zip_file = tmp_test_dir / "app.zip"
        zip_file.write_bytes(b"zip")

        result = validate_settings({"token": "tok", "file": str(zip_file)})

        assert result.valid
        assert any(".ipa or .apk" in w for w in result.warnings)

    def test_callback_url_must_be_http(self, ipa_file: Path):
        base = {"token": "tok", "file": str(ipa_file)}

        ok = validate_settings({**base, "callback_url": "https://ci.example.com/x"})
        bad = validate_settings({**base, "callback_url": "not a url"})
        ftp = validate_settings({**base, "callback_url": "ftp://example.com"})

        assert ok.valid
        assert any("callback_url" in e for e in bad.errors)
        assert any("callback_url" in e for e in ftp.errors)

    def test_callback_emails(self, ipa_file: Path):
        base = {"token": "tok", "file": str(ipa_file)}

        single = validate_settings({**base, "callback_emails": "a@example.com"})
        several = validate_settings(
            {**base, "callback_emails": "a@example.com, b@example.com"}
        )
        too_many = validate_settings(
            {**base, "callback_emails": ",".join(f"u{i}@x.com" for i in range(6))}
        )
        invalid = validate_settings({**base, "callback_emails": "nobody"})

        assert single.valid and single.warnings == []
        assert several.valid
        assert any("starter/premium/enterprise" in w for w in several.warnings)
        assert any("at most 5" in e for e in too_many.errors)
        assert any("invalid address 'nobody'" in e for e in invalid.errors)

    def test_find_by_udid_on_apk_warns(self, apk_file: Path):
        result = validate_settings(
            {"token": "tok", "file": str(apk_file), "find_by_udid": True}
        )

        assert result.valid
        assert any("iOS" in w for w in result.warnings)
