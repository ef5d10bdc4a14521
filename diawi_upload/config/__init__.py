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

"""Settings management for diawi-upload.

This module resolves upload settings from a YAML config file, ``DIAWI_*``
environment variables and command line values.

Public API:

load_settings : function
    Resolve the effective settings (config file, environment, CLI).
split_settings : function
    Split settings into (file_path, token, upload options).

Example:
    from diawi_upload.config import load_settings, split_settings

    settings = load_settings({"file": "app.apk", "token": "abc"})
    file_path, token, options = split_settings(settings)

"""

from .loader import load_settings, split_settings

__all__ = ["load_settings", "split_settings"]
