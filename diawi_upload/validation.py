# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Upload settings validation.

This module checks resolved settings before anything is sent to diawi, so a
pipeline fails fast on a missing token or a typo in the binary path instead
of after a long upload.

Validation Checks:

- Token is present
- File is set and exists
- callback_url is an http(s) URL
- callback_emails holds at most 5 addresses, each containing "@"

Warnings (upload still allowed):

- File extension is not .ipa or .apk
- More than one callback email (free accounts accept only one)
- find_by_udid set for an .apk (the option is iOS only)

Example:
    Validate settings and handle results:
        ```python
        from diawi_upload.config import load_settings
        from diawi_upload.validation import validate_settings

        result = validate_settings(load_settings({"file": "app.ipa"}))
        if not result.valid:
            for error in result.errors:
                print(f"Error: {error}")
        ```

"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from diawi_upload.results import ValidationResult

__all__ = ["validate_settings"]

SUPPORTED_EXTENSIONS = (".ipa", ".apk")
MAX_CALLBACK_EMAILS = 5


def _split_emails(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def validate_settings(
    settings: Mapping[str, Any], verbose: bool = False
) -> ValidationResult:
    """Validate upload settings without making network calls.

    Args:
        settings: Resolved settings (see diawi_upload.config.load_settings).
        verbose: If True, print validation progress.
            Default is False.

    Returns:
        Validation result with status "valid" or "invalid", errors and
            warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not settings.get("token"):
        errors.append("Missing required setting: token")
    elif verbose:
        print("  [OK] Token is set")

    file_value = settings.get("file")
    file_path: Path | None = None
    if not file_value:
        errors.append("Missing required setting: file")
    else:
        file_path = Path(str(file_value))
        if not file_path.is_file():
            errors.append(f"Couldn't find file at path '{file_path}'")
        elif verbose:
            print(f"  [OK] File exists: {file_path}")

        if file_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            warnings.append(
                f"File '{file_path.name}' is not an .ipa or .apk; "
                "diawi may reject it"
            )

    callback_url = settings.get("callback_url")
    if callback_url is not None:
        parsed = urlparse(str(callback_url))
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"The callback_url is not valid: {callback_url}")

    callback_emails = settings.get("callback_emails")
    if callback_emails is not None:
        emails = _split_emails(str(callback_emails))
        if not emails:
            errors.append("callback_emails is set but contains no address")
        if len(emails) > MAX_CALLBACK_EMAILS:
            errors.append(
                f"callback_emails accepts at most {MAX_CALLBACK_EMAILS} "
                f"addresses, got {len(emails)}"
            )
        for email in emails:
            if "@" not in email:
                errors.append(f"callback_emails: invalid address '{email}'")
        if len(emails) > 1:
            warnings.append(
                "Multiple callback_emails are only accepted on "
                "starter/premium/enterprise accounts"
            )

    if (
        settings.get("find_by_udid")
        and file_path is not None
        and file_path.suffix.lower() == ".apk"
    ):
        warnings.append("find_by_udid only applies to iOS builds (.ipa)")

    status = "valid" if not errors else "invalid"

    if verbose:
        if status == "valid":
            print("  [OK] Settings are valid!")
        else:
            print(f"  [ERROR] Settings have {len(errors)} error(s)")

    return ValidationResult(status=status, errors=errors, warnings=warnings)
