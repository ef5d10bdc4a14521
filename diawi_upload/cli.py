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

"""Command-line interface for diawi-upload.

This module provides the ``diawi`` CLI entry point.

Commands:

    upload: Upload a build to diawi and wait for the installation link
    validate: Check settings (token, file, callback options) without uploading

Example:
    Upload a build:
        ```bash
        $ diawi upload build/MyApp.ipa --token "$DIAWI_TOKEN"
        ```

    Upload with options and keep the link for later steps:
        ```bash
        $ diawi upload build/app.apk --comment "nightly" --no-wall-of-apps \\
            --output-file diawi_link.txt
        ```

    Validate settings only:
        ```bash
        $ diawi validate build/MyApp.ipa
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, network, upload rejected, processing failed,
  unknown status)
- 2: Status check timed out (the upload itself probably succeeded)

Note:
    Settings are resolved from diawi.yaml, DIAWI_* environment variables and
    the command line, in that order (last wins).
    Verbose mode shows full tracebacks on errors for debugging.
"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
import traceback
from typing import Any

from diawi_upload import __version__
from diawi_upload.config import load_settings, split_settings
from diawi_upload.core import upload_to_diawi
from diawi_upload.exceptions import ConfigError, DiawiError, NetworkError
from diawi_upload.logging import get_logger, set_global_logger
from diawi_upload.options import OPTIONS_BY_KEY, UPLOAD_OPTION_KEYS
from diawi_upload.poller import DEFAULT_MAX_ATTEMPTS, DEFAULT_POLL_INTERVAL
from diawi_upload.results import OutcomeKind, UploadOutcome, ValidationResult
from diawi_upload.validation import validate_settings

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_TIMEOUT = 2


def _cli_values(args: argparse.Namespace) -> dict[str, Any]:
    values: dict[str, Any] = {"token": args.token, "file": args.file}
    for key in UPLOAD_OPTION_KEYS:
        values[key] = getattr(args, key)
    values["poll_interval"] = getattr(args, "poll_interval", None)
    values["max_attempts"] = getattr(args, "max_attempts", None)
    return values


def _print_validation(result: ValidationResult) -> None:
    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()
    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()


def _print_outcome(outcome: UploadOutcome) -> None:
    print("=" * 70)
    print("UPLOAD RESULTS")
    print("=" * 70)
    print(f"File:            {outcome.file_path}")
    print(f"Job ID:          {outcome.job_id or '-'}")
    print(f"Status Checks:   {outcome.attempts}")
    print(f"Outcome:         {outcome.kind.value}")
    if outcome.link:
        print(f"Link:            {outcome.link}")
    if outcome.message:
        print(f"Message:         {outcome.message}")
    print("=" * 70)
    print()


def _exit_code_for(outcome: UploadOutcome) -> int:
    if outcome.kind is OutcomeKind.SUCCESS:
        return EXIT_OK
    if outcome.kind is OutcomeKind.POLL_TIMEOUT:
        return EXIT_TIMEOUT
    return EXIT_ERROR


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        traceback.print_exc()
    return EXIT_ERROR


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'diawi validate' command.

    Resolves settings and checks them without any network call. Useful as a
    pre-check in CI before a long build.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for valid settings, 1 for invalid).
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        settings = load_settings(_cli_values(args), config_path=args.config)
    except ConfigError as err:
        return _report_error(err, args)

    result = validate_settings(settings, verbose=args.verbose)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"File:        {settings.get('file', '-')}")
    print(f"Status:      {result.status.upper()}")
    print()
    _print_validation(result)
    print("=" * 70)

    if result.valid:
        print()
        print("[SUCCESS] Settings are valid!")
        return EXIT_OK
    print()
    print(f"[FAILED] Validation failed with {len(result.errors)} error(s).")
    return EXIT_ERROR


def cmd_upload(args: argparse.Namespace) -> int:
    """Handler for 'diawi upload' command.

    Validates settings, uploads the binary, waits for diawi to process it
    and prints the installation link.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure, 2 for a status check
            timeout).

    Note:
        Writes the link to --output-file when given and the upload
        succeeded.
    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        settings = load_settings(_cli_values(args), config_path=args.config)
    except ConfigError as err:
        return _report_error(err, args)

    result = validate_settings(settings, verbose=args.verbose)
    _print_validation(result)
    if not result.valid:
        print(f"[FAILED] Validation failed with {len(result.errors)} error(s).")
        return EXIT_ERROR

    try:
        file_path, token, options = split_settings(settings)
        print(f"Uploading to diawi: {file_path}")
        print()
        outcome = upload_to_diawi(
            file_path,
            token,
            options,
            poll_interval=settings.get("poll_interval", DEFAULT_POLL_INTERVAL),
            max_attempts=settings.get("max_attempts", DEFAULT_MAX_ATTEMPTS),
            logger=logger,
        )
    except (ConfigError, NetworkError) as err:
        return _report_error(err, args)
    except DiawiError as err:
        # Catch any other diawi-upload errors we might have missed
        return _report_error(err, args)
    except OSError as err:
        return _report_error(err, args)

    print()
    _print_outcome(outcome)

    # Message and suggestion were already reported through the logger
    if outcome.ok:
        print(f"[SUCCESS] Uploaded to diawi: {outcome.link}")
        if args.output_file:
            output_file = Path(args.output_file)
            try:
                output_file.parent.mkdir(parents=True, exist_ok=True)
                output_file.write_text(f"{outcome.link}\n", encoding="utf-8")
            except OSError as err:
                print(f"[FAILED] Could not write link to {output_file}")
                return _report_error(err, args)
            logger.verbose("UPLOAD", f"Link written to {output_file}")
    elif outcome.soft_failure:
        print("[WARNING] diawi had not finished processing the upload in time.")
    else:
        print(f"[FAILED] Upload to diawi did not succeed ({outcome.kind.value}).")

    return _exit_code_for(outcome)


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help=f"{OPTIONS_BY_KEY['file'].description} (or DIAWI_FILE)",
    )
    parser.add_argument(
        "--token",
        default=None,
        help=f"{OPTIONS_BY_KEY['token'].description} (or DIAWI_TOKEN)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: ./diawi.yaml if present)",
    )
    for key in UPLOAD_OPTION_KEYS:
        spec = OPTIONS_BY_KEY[key]
        flag = "--" + key.replace("_", "-")
        if spec.is_bool:
            parser.add_argument(
                flag,
                dest=key,
                action=argparse.BooleanOptionalAction,
                default=None,
                help=f"{spec.description} (or {spec.env_name})",
            )
        else:
            parser.add_argument(
                flag,
                dest=key,
                default=None,
                help=f"{spec.description} (or {spec.env_name})",
            )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _package_version() -> str:
    try:
        return version("diawi-upload")
    except PackageNotFoundError:
        return __version__


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the diawi CLI."""
    parser = argparse.ArgumentParser(
        prog="diawi",
        description="Upload .ipa/.apk builds to diawi and get the install link",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"diawi {_package_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'upload' command
    parser_upload = subparsers.add_parser(
        "upload",
        help="Upload a build and wait for the installation link",
        description="Upload an .ipa/.apk to diawi and poll until it is processed.",
    )
    _add_settings_arguments(parser_upload)
    parser_upload.add_argument(
        "--output-file",
        default=None,
        help="Write the installation link to this file on success",
    )
    parser_upload.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help=f"Seconds between status checks (default: {DEFAULT_POLL_INTERVAL:g})",
    )
    parser_upload.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help=f"Maximum number of status checks (default: {DEFAULT_MAX_ATTEMPTS})",
    )
    parser_upload.set_defaults(func=cmd_upload)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate settings without uploading",
        description="Check token, file and callback settings without network calls.",
    )
    _add_settings_arguments(parser_validate)
    parser_validate.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the diawi CLI.

    This function is registered as the 'diawi' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
