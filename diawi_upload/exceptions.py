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

"""Exception hierarchy for diawi-upload.

All exceptions inherit from DiawiError, so callers can catch every
diawi-upload error with a single except clause if needed.

Only conditions the caller cannot continue from are raised. The outcomes of
a finished upload (rejected upload, failed processing, unknown status,
status check timeout) are returned as an UploadOutcome instead; see
diawi_upload.results.

Example:
    Catching specific error types:
        ```python
        from pathlib import Path
        from diawi_upload.core import upload_to_diawi
        from diawi_upload.exceptions import ConfigError, NetworkError

        try:
            outcome = upload_to_diawi(Path("app.ipa"), token="...")
        except ConfigError as e:
            print(f"Configuration error: {e}")
        except NetworkError as e:
            print(f"Network error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "DiawiError",
    "ConfigError",
    "NetworkError",
    "UploadRejectedError",
]


class DiawiError(Exception):
    """Base exception for all diawi-upload errors."""

    pass


class ConfigError(DiawiError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Missing required settings (no token, no file to upload)
    - Invalid setting values (callback URL, boolean flags that cannot be
        parsed)
    - Config file errors (YAML syntax errors, unknown keys, file not found)

    Example:
        Catching configuration errors:
            ```python
            from diawi_upload.config import load_settings
            from diawi_upload.exceptions import ConfigError

            try:
                settings = load_settings({"file": "app.ipa"})
            except ConfigError as e:
                print(f"Config error: {e}")
            ```
    """

    pass


class NetworkError(DiawiError):
    """Raised for transport-level failures talking to diawi.

    Connection errors, timeouts and HTTP errors from the underlying requests
    session are chained onto this exception, so the original cause stays
    available through ``__cause__``.
    """

    pass


class UploadRejectedError(DiawiError):
    """Raised when the upload endpoint does not hand back a job id.

    Carries the service's ``message`` field when one was present. The
    orchestration layer converts this into an UPLOAD_REJECTED outcome rather
    than letting it reach the host.
    """

    def __init__(self, message: str, response_body: object = None) -> None:
        super().__init__(message)
        self.message = message
        self.response_body = response_body
