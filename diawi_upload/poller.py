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

"""Waiting for diawi to finish processing an upload.

diawi's documentation states that processing usually takes 0.5 to 5 seconds
and that a job still in progress after about 10 seconds probably has a
problem. The poller therefore queries the status every 2 seconds, at most 5
times, and stops at the first answer that settles the job:

- done: the outcome carries the ``https://i.diawi.com/<hash>`` link
- failed: the outcome carries diawi's message
- unknown status: the outcome says so
- still processing after the last attempt: the status check timed out. The
  upload itself probably went through; the outcome points at the dashboard.

Every failed outcome includes a suggestion to upload the file by hand.

Example:
    ```python
    from pathlib import Path
    from diawi_upload.poller import StatusPoller

    poller = StatusPoller()
    outcome = poller.poll(token="...", job_id="abc", file_path=Path("app.ipa"))
    print(outcome.link or outcome.message)
    ```

Note:
    Waiting is a blocking sleep. Only one job is tracked per poller call.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
import time

import requests

from diawi_upload.logging import Logger, get_global_logger
from diawi_upload.results import (
    OutcomeKind,
    UploadOutcome,
    build_link,
    manual_upload_suggestion,
)
from diawi_upload.status import JobStatus, check_status

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 5

DASHBOARD_URL = "https://dashboard.diawi.com/"


class StatusPoller:
    """Polls one diawi job until it settles or the attempt budget runs out.

    Args:
        session: Session used for status queries. A fresh one is created per
            query when omitted.
        poll_interval: Seconds to wait between queries.
        max_attempts: Maximum number of status queries.
        sleep: Blocking wait function, replaceable in tests.
        logger: Logger for notices. Defaults to the global logger at poll
            time.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
        logger: Logger | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if poll_interval < 0:
            raise ValueError("poll_interval cannot be negative")
        self.session = session
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._logger = logger

    def poll(self, token: str, job_id: str, file_path: Path | str) -> UploadOutcome:
        """Query the job status until it is done, failed, or out of attempts.

        Args:
            token: API access token.
            job_id: Job id returned by the upload.
            file_path: The uploaded binary; named in manual-upload
                suggestions.

        Returns:
            The outcome of the upload.

        Raises:
            NetworkError: If a status query could not be sent.
        """
        logger = self._logger or get_global_logger()
        file_path = Path(file_path)
        suggestion = manual_upload_suggestion(file_path)
        attempt = 0

        while True:
            result = check_status(token, job_id, session=self.session, logger=logger)
            queries = attempt + 1

            if result.status is JobStatus.OK:
                link = build_link(result.hash)
                logger.info(
                    "STATUS", f"Successfully uploaded file to diawi. Link: {link}"
                )
                return UploadOutcome(
                    kind=OutcomeKind.SUCCESS,
                    file_path=file_path,
                    link=link,
                    job_id=job_id,
                    attempts=queries,
                )

            if result.status is JobStatus.FAILED:
                message = f"Error uploading to diawi. Message: {result.message}"
                logger.warning("STATUS", message)
                logger.warning("STATUS", suggestion)
                return UploadOutcome(
                    kind=OutcomeKind.REMOTE_FAILURE,
                    file_path=file_path,
                    job_id=job_id,
                    message=message,
                    suggestion=suggestion,
                    attempts=queries,
                )

            if result.status is JobStatus.UNKNOWN:
                message = (
                    f"Unknown error uploading to diawi (status: {result.code!r})."
                )
                logger.warning("STATUS", message)
                logger.warning("STATUS", suggestion)
                return UploadOutcome(
                    kind=OutcomeKind.UNKNOWN_STATUS,
                    file_path=file_path,
                    job_id=job_id,
                    message=message,
                    suggestion=suggestion,
                    attempts=queries,
                )

            attempt += 1
            logger.info(
                "STATUS",
                f"Processing upload... (attempt {attempt}/{self.max_attempts})",
            )
            if attempt >= self.max_attempts:
                break
            self._sleep(self.poll_interval)

        waited = self.poll_interval * (self.max_attempts - 1)
        message = (
            f"'In progress' status after {self.max_attempts} checks "
            f"(~{waited:g} sec). Check out {DASHBOARD_URL}, "
            "maybe your file uploaded successfully."
        )
        timeout_suggestion = f"If not, {suggestion[0].lower()}{suggestion[1:]}"
        logger.warning("STATUS", message)
        logger.warning("STATUS", timeout_suggestion)
        return UploadOutcome(
            kind=OutcomeKind.POLL_TIMEOUT,
            file_path=file_path,
            job_id=job_id,
            message=message,
            suggestion=timeout_suggestion,
            attempts=attempt,
        )
