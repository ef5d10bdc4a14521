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

"""Multipart upload of a binary to diawi.

This module sends the .ipa/.apk to diawi's upload endpoint and hands back
the job id diawi assigns to the processing of that upload. Processing is
asynchronous; see diawi_upload.poller for waiting on the job.

Request fields:

- **token**: API access token (always sent)
- **file**: The binary, sent as application/octet-stream (always sent)
- **password**, **comment**, **callback_url**, **callback_emails**: Sent
  as-is when set
- **find_by_udid**, **wall_of_apps**, **installation_notifications**: Sent
  as "1"/"0" when set

Unset (None) fields are left out of the request entirely.

Example:
    Upload a build and get the job id:
        ```python
        from pathlib import Path
        from diawi_upload.io.upload import upload_file

        with Path("build/app.ipa").open("rb") as fh:
            job_id = upload_file(fh, token="...", options={"comment": "nightly"})
        ```

Note:
    The request is sent exactly once. The file object belongs to the caller:
    it is read but never closed.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, BinaryIO

import requests

from diawi_upload.exceptions import NetworkError, UploadRejectedError
from diawi_upload.io.http import UPLOAD_TIMEOUT, UPLOAD_URL, json_body, make_session
from diawi_upload.logging import Logger, get_global_logger
from diawi_upload.options import BOOL_OPTION_KEYS, UPLOAD_OPTION_KEYS

BINARY_CONTENT_TYPE = "application/octet-stream"


def build_upload_fields(
    token: str, options: Mapping[str, Any] | None
) -> dict[str, str]:
    """Build the non-file form fields of an upload request.

    Every optional upload field that is present and not None is included;
    flags are coerced to "1"/"0". Keys that are not upload fields are
    ignored.

    Args:
        token: API access token.
        options: Optional upload fields keyed by setting name.

    Returns:
        Ordered dict of form field name to string value, token first.

    Example:
        ```python
        build_upload_fields("abc", {"comment": "hi", "wall_of_apps": False})
        # {"token": "abc", "comment": "hi", "wall_of_apps": "0"}
        ```
    """
    fields: dict[str, str] = {"token": token}
    options = options or {}
    for key in UPLOAD_OPTION_KEYS:
        value = options.get(key)
        if value is None:
            continue
        if key in BOOL_OPTION_KEYS:
            fields[key] = "1" if value else "0"
        else:
            fields[key] = str(value)
    return fields


def upload_file(
    file: BinaryIO,
    token: str,
    options: Mapping[str, Any] | None = None,
    *,
    filename: str | None = None,
    session: requests.Session | None = None,
    logger: Logger | None = None,
) -> str:
    """Upload a binary to diawi and return the processing job id.

    Args:
        file: Readable binary file object. Not closed by this function.
        token: API access token.
        options: Optional upload fields (see build_upload_fields).
        filename: Name sent for the file part. Defaults to the basename of
            ``file.name``.
        session: Session to send the request with. A fresh one from
            make_session() is used (and closed) when omitted.
        logger: Logger for progress output. Defaults to the global logger.

    Returns:
        The job id assigned by diawi.

    Raises:
        UploadRejectedError: If the response does not carry a job id. The
            service's ``message`` is used when present.
        NetworkError: If the request could not be sent or no response was
            received.
    """
    if logger is None:
        logger = get_global_logger()

    if filename is None:
        filename = Path(getattr(file, "name", "upload.bin")).name

    fields = build_upload_fields(token, options)
    logger.verbose(
        "UPLOAD",
        f"Fields: {', '.join(k for k in fields if k != 'token') or '(none)'}",
    )
    logger.debug("HTTP", f"POST {UPLOAD_URL} ({filename})")

    own_session = session is None
    if own_session:
        session = make_session()
    try:
        resp = session.post(
            UPLOAD_URL,
            data=fields,
            files={"file": (filename, file, BINARY_CONTENT_TYPE)},
            timeout=UPLOAD_TIMEOUT,
        )
    except requests.RequestException as err:
        raise NetworkError(f"upload to diawi failed: {err}") from err
    finally:
        if own_session:
            session.close()

    logger.debug("HTTP", f"Response: {resp.status_code} {resp.reason}")

    body = json_body(resp)
    if body is not None and body.get("job"):
        job_id = str(body["job"])
        logger.verbose("UPLOAD", f"Upload accepted, job id: {job_id}")
        return job_id

    if body is not None and body.get("message"):
        message = f"Error uploading to diawi: {body['message']}"
    else:
        message = (
            "Error uploading to diawi: unexpected response "
            f"(HTTP {resp.status_code})"
        )
    raise UploadRejectedError(message, response_body=body)
