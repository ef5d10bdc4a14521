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

"""Declarative schema of the settings diawi-upload accepts.

Each setting is described once here (key, environment variable, help text,
whether it is required, whether it is a flag). The config loader and the
CLI both read this table; the upload core only ever sees the resulting
plain mapping.

Settings:

- **token** (required): API access token. ``DIAWI_TOKEN``.
- **file** (required): Path to the .ipa or .apk file. ``DIAWI_FILE``.
- **find_by_udid**: Let testers find the app by UDID (iOS only).
- **wall_of_apps**: Show the app icon on diawi's wall of apps.
- **password**: Password protecting the installation page.
- **comment**: Text shown on the installation page.
- **callback_url**: URL diawi calls with the result.
- **callback_emails**: Comma separated addresses diawi mails the result to.
- **installation_notifications**: Notify on each install (paid accounts).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from diawi_upload.exceptions import ConfigError

__all__ = [
    "OptionSpec",
    "OPTIONS",
    "OPTIONS_BY_KEY",
    "UPLOAD_OPTION_KEYS",
    "BOOL_OPTION_KEYS",
    "parse_bool",
]

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class OptionSpec:
    """One configurable setting."""

    key: str
    env_name: str
    description: str
    optional: bool = True
    is_bool: bool = False


OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec(
        key="token",
        env_name="DIAWI_TOKEN",
        description="API access token",
        optional=False,
    ),
    OptionSpec(
        key="file",
        env_name="DIAWI_FILE",
        description="Path to .ipa or .apk file",
        optional=False,
    ),
    OptionSpec(
        key="find_by_udid",
        env_name="DIAWI_FIND_BY_UDID",
        description=(
            "Allow your testers to find the app on diawi's mobile web app "
            "using their UDID (iOS only)"
        ),
        is_bool=True,
    ),
    OptionSpec(
        key="wall_of_apps",
        env_name="DIAWI_WALL_OF_APPS",
        description="Allow diawi to display the app's icon on the wall of apps",
        is_bool=True,
    ),
    OptionSpec(
        key="password",
        env_name="DIAWI_PASSWORD",
        description=(
            "Protect your app with a password: it will be required to access "
            "the installation page"
        ),
    ),
    OptionSpec(
        key="comment",
        env_name="DIAWI_COMMENT",
        description=(
            "Additional information to your users on this build: the comment "
            "will be displayed on the installation page"
        ),
    ),
    OptionSpec(
        key="callback_url",
        env_name="DIAWI_CALLBACK_URL",
        description="The URL diawi should call with the result",
    ),
    OptionSpec(
        key="callback_emails",
        env_name="DIAWI_CALLBACK_EMAILS",
        description=(
            "The email addresses diawi will send the result to (up to 5 "
            "separated by commas for starter/premium/enterprise accounts, "
            "1 for free accounts)"
        ),
    ),
    OptionSpec(
        key="installation_notifications",
        env_name="DIAWI_INSTALLATION_NOTIFICATIONS",
        description=(
            "Receive notifications each time someone installs the app "
            "(only starter/premium/enterprise accounts)"
        ),
        is_bool=True,
    ),
)

OPTIONS_BY_KEY: dict[str, OptionSpec] = {opt.key: opt for opt in OPTIONS}

# Optional fields forwarded to the upload endpoint, in request order.
UPLOAD_OPTION_KEYS: tuple[str, ...] = (
    "password",
    "comment",
    "callback_url",
    "callback_emails",
    "find_by_udid",
    "wall_of_apps",
    "installation_notifications",
)

BOOL_OPTION_KEYS: frozenset[str] = frozenset(
    opt.key for opt in OPTIONS if opt.is_bool
)


def parse_bool(value: Any, key: str = "value") -> bool:
    """Interpret a flag coming from YAML, the environment or the CLI.

    Args:
        value: A bool, an int 0/1, or one of the strings 1/0, true/false,
            yes/no, on/off (case-insensitive).
        key: Setting name used in the error message.

    Returns:
        The parsed boolean.

    Raises:
        ConfigError: If the value cannot be read as a boolean.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigError(f"{key}: expected a boolean (true/false or 1/0), got {value!r}")
