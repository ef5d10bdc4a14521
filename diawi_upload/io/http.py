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

"""HTTP session setup for talking to diawi.

Transport concerns (TLS, redirects, retrying transient failures) live here
so the upload and status code never has to deal with them.

Constants:

- UPLOAD_URL (str): Multipart upload endpoint.
- STATUS_URL (str): Job status endpoint.
- UPLOAD_TIMEOUT (int): Per-request timeout for the upload POST (seconds).
- STATUS_TIMEOUT (int): Per-request timeout for a status GET (seconds).

Notes:
- Retries only apply to GET. The upload POST is sent once; resending a
  multipart body after a partial failure could create a second job.
- Timeouts are per-request, not total transfer time.
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from diawi_upload import __version__

UPLOAD_URL = "https://upload.diawi.com/"
STATUS_URL = "https://upload.diawi.com/status"

UPLOAD_TIMEOUT = 60
STATUS_TIMEOUT = 30


def make_session() -> requests.Session:
    """
    Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes (GET only).
    - Applies exponential backoff.
    - Sets a User-Agent identifying diawi-upload.
    """
    s = requests.Session()
    retries = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    s.headers.update(
        {
            "User-Agent": f"diawi-upload/{__version__}",
            "Accept": "application/json",
        }
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def json_body(resp: requests.Response) -> dict | None:
    """Return the response body as a dict, or None if it isn't a JSON object."""
    try:
        data = resp.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None
