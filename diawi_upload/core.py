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

"""Core orchestration for diawi-upload.

This module ties the two halves of a diawi upload together:

1. Send the binary to the upload endpoint and get a job id back
2. Poll the job status until diawi has processed the binary

The result is returned as an UploadOutcome. Storing the link for later
pipeline steps (a file, an environment variable, a CI output) is up to the
caller.

Design Principles:

- Upload and polling are strictly sequential; only one job per call
- A rejected upload, a failed or unknown job status and a status check
  timeout are outcomes, not exceptions. The caller decides whether any of
  them should stop the pipeline
- Transport failures raise NetworkError

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from diawi_upload.core import upload_to_diawi

        outcome = upload_to_diawi(
            Path("build/app.ipa"),
            token="...",
            options={"comment": "nightly", "wall_of_apps": False},
        )

        if outcome.ok:
            print(f"Link: {outcome.link}")
        elif outcome.soft_failure:
            print(f"Warning: {outcome.message}")
        else:
            print(f"Error: {outcome.message}")
        ```

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
import time
from typing import Any

import requests

from diawi_upload.exceptions import UploadRejectedError
from diawi_upload.io.http import make_session
from diawi_upload.io.upload import upload_file
from diawi_upload.logging import Logger, get_global_logger
from diawi_upload.poller import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    StatusPoller,
)
from diawi_upload.results import (
    OutcomeKind,
    UploadOutcome,
    manual_upload_suggestion,
)


def upload_to_diawi(
    file_path: Path,
    token: str,
    options: Mapping[str, Any] | None = None,
    *,
    session: requests.Session | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    logger: Logger | None = None,
) -> UploadOutcome:
    """Upload a binary to diawi and wait until it has been processed.

    Args:
        file_path: Path to the .ipa/.apk to upload. Must exist.
        token: API access token.
        options: Optional upload fields (password, comment, callback_url,
            callback_emails, find_by_udid, wall_of_apps,
            installation_notifications). None values are not sent.
        session: Session used for every request. A session from
            make_session() is created and closed when omitted; a supplied
            session is left open.
        poll_interval: Seconds between status queries. Default is 2.
        max_attempts: Maximum number of status queries. Default is 5.
        sleep: Blocking wait function used between status queries.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        UploadOutcome with kind SUCCESS and the link, or one of
            UPLOAD_REJECTED, REMOTE_FAILURE, UNKNOWN_STATUS, POLL_TIMEOUT
            with a message and a manual-upload suggestion.

    Raises:
        NetworkError: If a request to diawi could not be sent.
        OSError: If the file cannot be opened.
    """
    if logger is None:
        logger = get_global_logger()

    file_path = Path(file_path)
    own_session = session is None
    if own_session:
        session = make_session()

    try:
        logger.step(1, 2, f"Uploading {file_path.name} to diawi...")
        with file_path.open("rb") as fh:
            try:
                job_id = upload_file(
                    fh,
                    token,
                    options,
                    filename=file_path.name,
                    session=session,
                    logger=logger,
                )
            except UploadRejectedError as err:
                suggestion = manual_upload_suggestion(file_path)
                logger.warning("UPLOAD", err.message)
                logger.warning("UPLOAD", suggestion)
                return UploadOutcome(
                    kind=OutcomeKind.UPLOAD_REJECTED,
                    file_path=file_path,
                    message=err.message,
                    suggestion=suggestion,
                )

        logger.step(2, 2, f"Waiting for diawi to process job {job_id}...")
        poller = StatusPoller(
            session,
            poll_interval=poll_interval,
            max_attempts=max_attempts,
            sleep=sleep,
            logger=logger,
        )
        return poller.poll(token, job_id, file_path)
    finally:
        if own_session:
            session.close()
