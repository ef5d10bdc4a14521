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

"""diawi-upload

Upload .ipa/.apk builds to diawi (https://www.diawi.com) from a build or
deploy pipeline and get back the public installation link.

diawi-upload provides:

- Multipart upload with diawi's optional fields (password, comment,
  callbacks, wall of apps, UDID lookup, installation notifications)
- Bounded polling of diawi's asynchronous processing status
- Structured outcomes (link, or a classified failure with a manual-upload
  suggestion) instead of process exits
- Settings from a YAML file, DIAWI_* environment variables, or the CLI

Quick Start:
Upload a build:

    $ export DIAWI_TOKEN=...
    $ diawi upload build/MyApp.ipa --comment "nightly"

Validate settings without uploading:

    $ diawi validate build/MyApp.ipa

For full CLI documentation:

    $ diawi --help
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Upload .ipa/.apk files to diawi and get the install link"

# Re-export commonly used functions for convenience
from diawi_upload.config import load_settings, split_settings
from diawi_upload.core import upload_to_diawi
from diawi_upload.exceptions import (
    ConfigError,
    DiawiError,
    NetworkError,
    UploadRejectedError,
)
from diawi_upload.poller import StatusPoller
from diawi_upload.results import OutcomeKind, UploadOutcome, ValidationResult
from diawi_upload.validation import validate_settings

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "upload_to_diawi",
    "load_settings",
    "split_settings",
    "validate_settings",
    "StatusPoller",
    "OutcomeKind",
    "UploadOutcome",
    "ValidationResult",
    "DiawiError",
    "ConfigError",
    "NetworkError",
    "UploadRejectedError",
]
