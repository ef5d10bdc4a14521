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

"""diawi job status protocol.

After an upload, diawi processes the binary asynchronously. The status
endpoint is queried with the token and job id and answers with a JSON
object whose integer ``status`` field tells where the job is:

- 2000: done, ``hash`` identifies the installation page
- 2001: still processing
- 4000: failed, ``message`` explains why

Anything else, including a body that isn't a JSON object or a 2000 answer
without a hash, is treated as an unknown status.

Example:
    ```python
    from diawi_upload.status import JobStatus, check_status

    result = check_status(token="...", job_id="abc")
    if result.status is JobStatus.OK:
        print(result.hash)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests

from diawi_upload.exceptions import NetworkError
from diawi_upload.io.http import STATUS_TIMEOUT, STATUS_URL, json_body, make_session
from diawi_upload.logging import Logger, get_global_logger

STATUS_OK = 2000
STATUS_IN_PROGRESS = 2001
STATUS_ERROR = 4000


class JobStatus(str, Enum):
    OK = "ok"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class StatusResult:
    """One classified status response.

    Attributes:
        status: Classification of the response.
        hash: Installation page hash (OK only).
        message: Service-provided failure message (FAILED only, may be None).
        code: Raw ``status`` value from the response, if any.
    """

    status: JobStatus
    hash: str | None = None
    message: str | None = None
    code: Any = None


def classify_status(body: Any) -> StatusResult:
    """Classify a decoded status response body."""
    if not isinstance(body, dict):
        return StatusResult(JobStatus.UNKNOWN)

    code = body.get("status")
    # bool is an int subclass; True must not read as a status code
    if isinstance(code, bool) or not isinstance(code, int):
        return StatusResult(JobStatus.UNKNOWN, code=code)

    if code == STATUS_OK:
        file_hash = body.get("hash")
        if not isinstance(file_hash, str) or not file_hash:
            return StatusResult(JobStatus.UNKNOWN, code=code)
        return StatusResult(JobStatus.OK, hash=file_hash, code=code)
    if code == STATUS_IN_PROGRESS:
        return StatusResult(JobStatus.IN_PROGRESS, code=code)
    if code == STATUS_ERROR:
        message = body.get("message")
        return StatusResult(
            JobStatus.FAILED,
            message=str(message) if message is not None else None,
            code=code,
        )
    return StatusResult(JobStatus.UNKNOWN, code=code)


def check_status(
    token: str,
    job_id: str,
    *,
    session: requests.Session | None = None,
    logger: Logger | None = None,
) -> StatusResult:
    """Query diawi once for the status of a job.

    Args:
        token: API access token.
        job_id: Job id returned by the upload.
        session: Session to send the request with. A fresh one from
            make_session() is used (and closed) when omitted.
        logger: Logger for debug output. Defaults to the global logger.

    Returns:
        The classified status.

    Raises:
        NetworkError: If the request could not be sent or no response was
            received.
    """
    if logger is None:
        logger = get_global_logger()

    own_session = session is None
    if own_session:
        session = make_session()
    try:
        resp = session.get(
            STATUS_URL,
            params={"token": token, "job": job_id},
            timeout=STATUS_TIMEOUT,
        )
    except requests.RequestException as err:
        raise NetworkError(f"status check for job {job_id} failed: {err}") from err
    finally:
        if own_session:
            session.close()

    body = json_body(resp)
    logger.debug("HTTP", f"GET {STATUS_URL} -> {resp.status_code} {body}")
    return classify_status(body)
