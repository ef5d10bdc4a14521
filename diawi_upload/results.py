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

"""Public API return types for diawi-upload.

This module defines the dataclasses returned from public API functions.
All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from diawi_upload.core import upload_to_diawi
        from diawi_upload.results import OutcomeKind

        outcome = upload_to_diawi(Path("build/app.ipa"), token="...")
        if outcome.kind is OutcomeKind.SUCCESS:
            print(outcome.link)
        else:
            print(outcome.message)
            print(outcome.suggestion)
        ```

Note:
    Only public API return types belong in this module. The per-poll
    StatusResult stays next to the status protocol in diawi_upload.status.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

LINK_BASE_URL = "https://i.diawi.com/"


def build_link(file_hash: str) -> str:
    """Build the public installation link for a processed upload."""
    return f"{LINK_BASE_URL}{file_hash}"


def manual_upload_suggestion(file_path: Path | str) -> str:
    """Suggestion attached to every failed outcome."""
    return f"Try to upload file by yourself: {file_path}"


class OutcomeKind(str, Enum):
    """How an upload ended."""

    SUCCESS = "success"
    UPLOAD_REJECTED = "upload_rejected"
    REMOTE_FAILURE = "remote_failure"
    UNKNOWN_STATUS = "unknown_status"
    POLL_TIMEOUT = "poll_timeout"


@dataclass(frozen=True)
class UploadOutcome:
    """Result from uploading a binary and waiting for diawi to process it.

    Attributes:
        kind: How the upload ended.
        file_path: The binary that was uploaded.
        link: Public installation link (only set on success).
        job_id: diawi job id, when the upload endpoint returned one.
        message: Human-readable description of the failure (None on success).
        suggestion: Manual-upload hint (None on success).
        attempts: Number of status queries that were issued.
    """

    kind: OutcomeKind
    file_path: Path
    link: str | None = None
    job_id: str | None = None
    message: str | None = None
    suggestion: str | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def soft_failure(self) -> bool:
        """True when only the status check timed out.

        The upload itself has most likely gone through in that case.
        """
        return self.kind is OutcomeKind.POLL_TIMEOUT


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating upload settings.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
    """

    status: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.status == "valid"
