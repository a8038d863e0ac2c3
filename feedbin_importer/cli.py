"""
Command-line interface for the Feedbin Importer.

This module provides the CLI for loading a Pocket CSV export, showing
the bookmarks it contains and importing them into a Feedbin account.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.prompt import Prompt

from feedbin_importer import __version__
from feedbin_importer.config.configuration import Configuration
from feedbin_importer.config.pydantic_config import ConfigurationManager
from feedbin_importer.core.csv_handler import PocketCSVHandler
from feedbin_importer.core.data_models import ImportPhase
from feedbin_importer.core.import_driver import CANCELLED_MESSAGE
from feedbin_importer.core.import_session import ImportSession
from feedbin_importer.utils.error_handler import (
    ConfigurationError,
    ErrorCategory,
    FeedbinImporterError,
    InvalidCredentialsError,
    categorize_error,
    hint_for,
)
from feedbin_importer.utils.logging_setup import setup_logging
from feedbin_importer.utils.progress_tracker import ImportProgressTracker
from feedbin_importer.utils.report_generator import ReportGenerator
from feedbin_importer.utils.validation import (
    ValidationError,
    validate_config_file,
    validate_delay,
    validate_input_file,
    validate_limit,
    validate_timeout,
)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_IMPORT_FAILED = 2
EXIT_INTERRUPTED = 130

EMAIL_ENV = "FEEDBIN_EMAIL"
PASSWORD_ENV = "FEEDBIN_PASSWORD"


class CLIInterface:
    """Command line interface for importing Pocket exports into Feedbin."""

    def __init__(self, reporter: Optional[ReportGenerator] = None):
        self.parser = self._create_parser()
        self.reporter = reporter or ReportGenerator()
        self.logger = logging.getLogger(__name__)

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create argument parser."""
        parser = argparse.ArgumentParser(
            prog="feedbin-importer",
            description="Import a Pocket bookmark export (CSV) into Feedbin",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  feedbin-importer --input part_000000.csv --preview
  feedbin-importer --input part_000000.csv --email you@example.com
  feedbin-importer --input part_000000.csv --check-credentials --verbose
  feedbin-importer --input part_000000.csv --mark-read-failure warn

Credentials:
  The password is asked for interactively and kept in memory only.
  FEEDBIN_EMAIL and FEEDBIN_PASSWORD are read from the environment
  when set. Credentials are never written to disk or to the log.

Behaviour:
  Bookmarks are sent one at a time, in file order. The first failure
  stops the import; bookmarks sent before it stay imported. Running the
  import again starts from the first bookmark.
            """,
        )

        parser.add_argument(
            "--version", "-V", action="version", version=f"%(prog)s {__version__}"
        )
        parser.add_argument(
            "--create-config",
            metavar="PATH",
            nargs="?",
            const="feedbin_importer.toml",
            help="Write a sample configuration file (default: feedbin_importer.toml)",
        )
        parser.add_argument("--input", "-i", help="Pocket CSV export to import")
        parser.add_argument(
            "--config",
            "-c",
            help="Configuration file (TOML or JSON). Defaults to "
            "feedbin_importer.toml in the current directory when present.",
        )
        parser.add_argument("--email", "-e", help="Feedbin account e-mail")
        parser.add_argument(
            "--delay",
            type=float,
            help="Seconds to wait after each imported bookmark (default: 0.5)",
        )
        parser.add_argument(
            "--timeout", type=int, help="Request timeout in seconds (default: 30)"
        )
        parser.add_argument("--base-url", help="Feedbin API root (for testing)")
        parser.add_argument(
            "--mark-read-failure",
            choices=["fail", "warn"],
            help="Whether a failed mark-as-read fails the bookmark (fail) "
            "or only warns (warn). Default: fail",
        )
        parser.add_argument(
            "--preview",
            action="store_true",
            help="Show the bookmarks in the file and exit without importing",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=20,
            help="Rows shown in the bookmark table (default: 20)",
        )
        parser.add_argument(
            "--check-credentials",
            action="store_true",
            help="Verify the credentials with Feedbin before importing",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the final import status as JSON",
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable debug logging"
        )

        return parser

    def parse_args(self, args=None) -> argparse.Namespace:
        """Parse command line arguments."""
        return self.parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> dict:
        """
        Validate all arguments and return processed values.

        Raises:
            ValidationError: If any validation fails
        """
        return {
            "input_path": validate_input_file(args.input),
            "config_path": validate_config_file(args.config),
            "email": args.email or os.environ.get(EMAIL_ENV),
            "delay": validate_delay(args.delay),
            "timeout": validate_timeout(args.timeout),
            "base_url": args.base_url,
            "mark_read_failure": args.mark_read_failure,
            "preview": args.preview,
            "limit": validate_limit(args.limit),
            "check_credentials": args.check_credentials,
            "json": args.json,
            "verbose": args.verbose,
        }

    def process_arguments(self, validated_args: dict) -> Configuration:
        """Load configuration, apply CLI overrides and set up logging."""
        config = Configuration(validated_args["config_path"])
        config.update_from_args(validated_args)
        setup_logging(verbose=validated_args["verbose"])
        return config

    def _handle_create_config(self, output: str) -> int:
        """Write a sample configuration file."""
        output_path = Path(output)
        if output_path.exists():
            self.reporter.print_error(f"Configuration file already exists: {output_path}")
            return EXIT_INPUT_ERROR

        fmt = "json" if output_path.suffix.lower() == ".json" else "toml"
        ConfigurationManager.create_sample_config(output_path, fmt)
        self.reporter.console.print(f"Created configuration file: {output_path}")
        return EXIT_OK

    def _prompt_for_credentials(self, session: ImportSession, email: Optional[str]) -> bool:
        """
        Ask for credentials until the gate accepts them.

        Returns:
            False if the user aborted the prompt
        """
        console = self.reporter.console
        console.print("[bold]Feedbin Credentials[/bold]")
        console.print(
            "Your e-mail and password are only used to upload your bookmarks "
            "to Feedbin and are never stored."
        )

        while session.credentials_prompt_pending:
            try:
                identity = Prompt.ask("Email", default=email, console=console)
                secret = Prompt.ask("Password", password=True, console=console)
            except (EOFError, KeyboardInterrupt):
                session.dismiss_credentials_prompt()
                console.print()
                return False

            try:
                session.provide_credentials(identity or "", secret or "")
            except InvalidCredentialsError as e:
                console.print(f"[red]{e}[/red]")
                email = identity

        return True

    def _ensure_credentials(self, session: ImportSession, validated_args: dict) -> bool:
        """Collect credentials up front for --check-credentials."""
        if not session.gate.has_credentials:
            session.gate.request_credentials()
            if not self._prompt_for_credentials(session, validated_args["email"]):
                return False
        return True

    def _wait_for_import(self, session: ImportSession) -> None:
        try:
            while session.is_importing:
                session.wait(0.5)
        except KeyboardInterrupt:
            self.reporter.console.print("\nCancelling after the current bookmark...")
            session.cancel_import()
            session.wait()

    def run_import(self, validated_args: dict, config: Configuration) -> int:
        """Load the CSV, collect credentials and run the import."""
        handler = PocketCSVHandler()
        table = handler.parse_file(validated_args["input_path"])
        if not table.is_valid:
            self.reporter.print_error(table.error, hint_for(ErrorCategory.INPUT))
            return EXIT_INPUT_ERROR

        records = table.records
        self.reporter.print_bookmarks(records, limit=validated_args["limit"])

        if validated_args["preview"]:
            return EXIT_OK

        session = ImportSession.from_config(config)
        try:
            email = validated_args["email"]
            password = os.environ.get(PASSWORD_ENV)
            if email and password:
                session.provide_credentials(email, password)

            if validated_args["check_credentials"]:
                if not self._ensure_credentials(session, validated_args):
                    return EXIT_INTERRUPTED
                if not session.submitter.verify_credentials(session.gate.credentials):
                    self.reporter.print_error(
                        "Feedbin rejected the credentials",
                        hint_for(ErrorCategory.AUTH),
                    )
                    return EXIT_INPUT_ERROR
                self.reporter.console.print("[green]Credentials verified[/green]")

            tracker = ImportProgressTracker()
            session.subscribe(tracker)

            if not session.start_import(records, background=True):
                if not self._prompt_for_credentials(session, email):
                    self.reporter.console.print("Import cancelled before it started.")
                    return EXIT_INTERRUPTED

            self._wait_for_import(session)
            status = session.status
        finally:
            session.close()

        self.reporter.print_status(status)
        if validated_args["json"]:
            print(self.reporter.status_json(status))

        if status.phase == ImportPhase.COMPLETED:
            return EXIT_OK
        if status.last_error == CANCELLED_MESSAGE:
            return EXIT_INTERRUPTED
        return EXIT_IMPORT_FAILED

    def run(self, args=None) -> int:
        """Execute CLI interface."""
        try:
            parsed_args = self.parse_args(args)

            if parsed_args.create_config:
                return self._handle_create_config(parsed_args.create_config)

            validated_args = self.validate_args(parsed_args)
            config = self.process_arguments(validated_args)

            self.logger.info("Feedbin Importer CLI starting")
            self.logger.info(f"Input file: {validated_args['input_path']}")
            self.logger.info(f"API: {config.base_url} (timeout {config.timeout}s)")
            self.logger.info(f"Mark-read failure policy: {config.mark_read_failure}")

            return self.run_import(validated_args, config)

        except ValidationError as e:
            print(f"Validation Error: {e}", file=sys.stderr)
            return EXIT_INPUT_ERROR
        except ConfigurationError as e:
            print(str(e), file=sys.stderr)
            return EXIT_INPUT_ERROR
        except FeedbinImporterError as e:
            details = categorize_error(e)
            self.reporter.print_error(details.message, details.hint)
            return EXIT_INPUT_ERROR
        except KeyboardInterrupt:
            return EXIT_INTERRUPTED


def main(args=None):
    """Main entry point for the CLI."""
    cli = CLIInterface()
    return cli.run(args)


if __name__ == "__main__":
    sys.exit(main())
