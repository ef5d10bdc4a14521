"""Input/Output operations for diawi-upload.

This module provides the HTTP plumbing used to talk to diawi: a configured
requests session and the multipart upload of a binary.

Modules:

http : module
    Session with retry/backoff defaults and the diawi endpoint constants.
upload : module
    Multipart upload returning the processing job id.

Public API:

upload_file : function
    Upload a binary and return diawi's job id.
build_upload_fields : function
    Build the form fields of an upload request.
make_session : function
    Create a requests.Session with retry defaults.

Example:
    from pathlib import Path
    from diawi_upload.io import upload_file

    with Path("app.apk").open("rb") as fh:
        job_id = upload_file(fh, token="...")

"""

from .http import make_session
from .upload import build_upload_fields, upload_file

__all__ = ["upload_file", "build_upload_fields", "make_session"]
