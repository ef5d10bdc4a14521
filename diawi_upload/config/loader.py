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

"""Settings loading and merging for diawi-upload.

This module resolves the effective upload settings from three layers, with
"last wins" semantics:

1. **Config file** (``diawi.yaml`` in the working directory, or the path
   given with ``--config``)
   - Flat YAML mapping of setting keys (see diawi_upload.options)
   - Optional; a missing default file is ignored, a missing explicit file
     is an error
   - Relative ``file`` paths are resolved against the config file location

2. **Environment variables** (``DIAWI_TOKEN``, ``DIAWI_FILE``, ...)
   - A ``.env`` file in the working directory is loaded first (python-dotenv)
   - Handy for keeping the token out of the pipeline definition

3. **Command line values**
   - Only values that are not None override earlier layers

Flags (find_by_udid, wall_of_apps, installation_notifications) are normalised
to real booleans regardless of the layer they came from.

Example:
    Basic usage:
        ```python
        from pathlib import Path
        from diawi_upload.config import load_settings, split_settings

        settings = load_settings({"file": "build/app.ipa", "comment": "nightly"})
        file_path, token, options = split_settings(settings)
        ```

Note:
    Poll tuning keys (poll_interval, max_attempts) are accepted in the
    config file as well; they never reach the upload request.
"""

from __future__ import annotations

from collections.abc import Mapping
import math
import os
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv
import yaml

from diawi_upload.exceptions import ConfigError
from diawi_upload.logging import get_global_logger
from diawi_upload.options import (
    BOOL_OPTION_KEYS,
    OPTIONS,
    OPTIONS_BY_KEY,
    UPLOAD_OPTION_KEYS,
    parse_bool,
)

DEFAULT_CONFIG_NAME = "diawi.yaml"

POLL_KEYS = ("poll_interval", "max_attempts")

TEXT_OPTION_KEYS = tuple(opt.key for opt in OPTIONS if not opt.is_bool)

# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Loads a YAML file and returns the parsed Python object.

    Args:
        p: Path to the YAML file to load.

    Returns:
        The parsed Python object from the YAML file.

    Raises:
        ConfigError: When file does not exist, invalid YAML (parse error), or
            empty files.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _read_config_file(p: Path) -> dict[str, Any]:
    data = _load_yaml_file(p)
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: top level must be a mapping of settings")

    unknown = sorted(set(data) - set(OPTIONS_BY_KEY) - set(POLL_KEYS))
    if unknown:
        raise ConfigError(f"{p}: unknown setting(s): {', '.join(unknown)}")

    # Relative binary paths follow the config file, not the working dir
    if isinstance(data.get("file"), str):
        file_path = Path(data["file"])
        if not file_path.is_absolute():
            data["file"] = str((p.parent / file_path).resolve())
    return data


# -------------------------------
# Layers
# -------------------------------


def _from_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for opt in OPTIONS:
        raw = environ.get(opt.env_name)
        if raw is not None and raw != "":
            values[opt.key] = raw
    return values


def _normalise(settings: dict[str, Any]) -> dict[str, Any]:
    result = dict(settings)
    for key in BOOL_OPTION_KEYS:
        if result.get(key) is not None:
            result[key] = parse_bool(result[key], key)
    # YAML turns unquoted yes/on/123 into bool/int; text fields stay text
    for key in TEXT_OPTION_KEYS:
        value = result.get(key)
        if value is not None and not isinstance(value, (str, os.PathLike)):
            raise ConfigError(
                f"{key}: expected text, got {value!r} (quote the value in YAML)"
            )
    if result.get("poll_interval") is not None:
        try:
            result["poll_interval"] = float(result["poll_interval"])
        except (TypeError, ValueError) as err:
            raise ConfigError(
                f"poll_interval: expected a number, got {result['poll_interval']!r}"
            ) from err
        interval = result["poll_interval"]
        if not math.isfinite(interval) or interval < 0:
            raise ConfigError(
                f"poll_interval: must be a finite number of seconds >= 0, "
                f"got {interval!r}"
            )
    if result.get("max_attempts") is not None:
        try:
            result["max_attempts"] = int(result["max_attempts"])
        except (TypeError, ValueError) as err:
            raise ConfigError(
                f"max_attempts: expected an integer, got {result['max_attempts']!r}"
            ) from err
        if result["max_attempts"] < 1:
            raise ConfigError("max_attempts: must be at least 1")
    return result


def load_settings(
    cli_values: Mapping[str, Any] | None = None,
    *,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Resolve the effective settings (config file, environment, CLI).

    Args:
        cli_values: Values from the command line. None entries are ignored.
        config_path: Explicit YAML config file. Must exist when given. When
            omitted, ``diawi.yaml`` in the working directory is used if
            present.
        environ: Environment mapping to read ``DIAWI_*`` variables from.
            Defaults to ``os.environ`` after loading a ``.env`` file.

    Returns:
        A flat dict of settings. Flags are booleans, unset settings are
            absent.

    Raises:
        ConfigError: On YAML errors, unknown config keys, or values that
            cannot be parsed.
    """
    logger = get_global_logger()

    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    settings: dict[str, Any] = {}

    if config_path is not None:
        logger.verbose("CONFIG", f"Loading config file: {config_path}")
        settings.update(_read_config_file(Path(config_path)))
    else:
        default_path = Path.cwd() / DEFAULT_CONFIG_NAME
        if default_path.exists():
            logger.verbose("CONFIG", f"Loading config file: {default_path}")
            settings.update(_read_config_file(default_path))

    env_values = _from_environment(environ)
    if env_values:
        logger.verbose(
            "CONFIG", f"Using environment for: {', '.join(sorted(env_values))}"
        )
    settings.update(env_values)

    for key, value in (cli_values or {}).items():
        if value is not None:
            settings[key] = value

    settings = _normalise(settings)
    logger.debug(
        "CONFIG",
        "Effective settings: "
        + ", ".join(
            f"{k}={'***' if k in ('token', 'password') else v}"
            for k, v in sorted(settings.items())
        ),
    )
    return settings


def split_settings(settings: Mapping[str, Any]) -> tuple[Path, str, dict[str, Any]]:
    """Split resolved settings into what the upload core takes.

    Args:
        settings: Output of load_settings().

    Returns:
        A tuple (file_path, token, options), where options holds only the
            optional upload fields that are set.

    Raises:
        ConfigError: If token or file is missing.
    """
    token = settings.get("token")
    if not token:
        raise ConfigError(
            "Missing required setting: token (use --token or DIAWI_TOKEN)"
        )
    file_value = settings.get("file")
    if not file_value:
        raise ConfigError("Missing required setting: file (use FILE or DIAWI_FILE)")

    options = {
        key: settings[key]
        for key in UPLOAD_OPTION_KEYS
        if settings.get(key) is not None
    }
    return Path(str(file_value)), str(token), options
