#!/usr/bin/env python3
# ABOUTME: Command-line interface for the DeepLX translator.
# ABOUTME: Parses arguments, dispatches subcommands, and prints results and errors.

import argparse
import os
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from deeplx_cli.client import DeepLXClient
from deeplx_cli.config import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_TIMEOUT,
    DEFAULT_URL,
    Config,
    ConfigStore,
    resolve_settings,
)
from deeplx_cli.errors import (
    DEEPLX_DOCKER_COMMAND,
    AuthenticationError,
    ConfigError,
    DeepLXError,
    ServerUnreachableError,
)
from deeplx_cli.language import LanguageHandler

console = Console()
err_console = Console(stderr=True)

COMMANDS = ("config", "setup", "doctor")

# Global options accepted before a subcommand
GLOBAL_VALUE_OPTIONS = ("-s", "--source", "-t", "--target", "-u", "--url", "-k", "--token", "--timeout")
GLOBAL_FLAG_OPTIONS = ("-a", "--alternatives", "--debug")

SETUP_LOCAL_TIMEOUT = 5
SETUP_REMOTE_TIMEOUT = 10
DOCTOR_TIMEOUT = 5


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive number of seconds")
    return number


class TranslatorCLI:
    """Command-line interface for the DeepLX translator."""

    @staticmethod
    def prompt(message: str) -> str:
        """Read one line of user input, treating end-of-input as an empty answer."""
        try:
            return input(message).strip()
        except EOFError:
            return ""

    @classmethod
    def build_translate_parser(cls) -> argparse.ArgumentParser:
        """Build the parser for the default translate action."""
        parser = argparse.ArgumentParser(
            prog=APP_NAME,
            description="A simple CLI for translating text using DeepLX.",
            epilog="Commands: config set|show, setup, doctor "
                   f"(run '{APP_NAME} <command> --help' for details)",
        )
        parser.add_argument("text", nargs="*", help="Text to translate (words are joined with spaces)")
        parser.add_argument(
            "-s", "--source", default="auto",
            help="Source language code (e.g., en, fr, es, auto for automatic detection)",
        )
        parser.add_argument(
            "-t", "--target", default="en",
            help="Target language code (e.g., en, fr, es)",
        )
        cls._add_server_arguments(parser)
        parser.add_argument(
            "-a", "--alternatives", action="store_true",
            help="Show alternative translations",
        )
        parser.add_argument(
            "--timeout", type=positive_int,
            help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})",
        )
        parser.add_argument("--debug", action="store_true", help="Enable debug output")
        parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")
        return parser

    @staticmethod
    def _add_server_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-u", "--url",
            help=f"DeepLX server URL (env: DEEPLX_URL, default: {DEFAULT_URL})",
        )
        parser.add_argument(
            "-k", "--token",
            help="Authentication token for DeepLX server (env: TOKEN, DEEPLX_TOKEN)",
        )

    @classmethod
    def build_command_parser(cls) -> argparse.ArgumentParser:
        """Build the parser for the config, setup and doctor subcommands."""
        parser = argparse.ArgumentParser(prog=APP_NAME)
        subparsers = parser.add_subparsers(dest="command")

        config_parser = subparsers.add_parser("config", help="Configure default settings")
        config_sub = config_parser.add_subparsers(dest="config_command")
        set_parser = config_sub.add_parser("set", help="Set a configuration value")
        set_parser.add_argument("--url", help="Set default DeepLX server URL")
        set_parser.add_argument("--token", help="Set default authentication token")
        config_sub.add_parser("show", help="Show current configuration")
        config_parser.set_defaults(config_parser=config_parser)

        subparsers.add_parser("setup", help="Interactive setup for DeepLX CLI")

        doctor_parser = subparsers.add_parser(
            "doctor", help="Diagnose configuration and connection issues"
        )
        cls._add_server_arguments(doctor_parser)
        doctor_parser.add_argument(
            "--timeout", type=positive_int,
            help=f"Timeout in seconds for each check (default: {DOCTOR_TIMEOUT})",
        )
        return parser

    @staticmethod
    def split_global_options(argv: List[str]) -> Tuple[List[str], List[str]]:
        """Split leading global options (and their values) from the rest of argv.

        Lets a subcommand follow global flags, e.g. `translate --url X doctor`.
        """
        i = 0
        while i < len(argv):
            arg = argv[i]
            if arg in GLOBAL_VALUE_OPTIONS:
                i += 2
            elif arg in GLOBAL_FLAG_OPTIONS:
                i += 1
            elif arg.startswith("--") and arg.split("=", 1)[0] in GLOBAL_VALUE_OPTIONS:
                i += 1
            elif not arg.startswith("--") and arg[:2] in GLOBAL_VALUE_OPTIONS and len(arg) > 2:
                i += 1
            else:
                break
        return argv[:i], argv[i:]

    @classmethod
    def run(cls, argv: Optional[List[str]] = None) -> int:
        """Run the command-line interface.

        Args:
            argv: Arguments without the program name (defaults to sys.argv[1:])

        Returns:
            Process exit code
        """
        if argv is None:
            argv = sys.argv[1:]

        load_dotenv()

        try:
            global_argv, rest = cls.split_global_options(argv)
            if rest and rest[0] in COMMANDS:
                global_args = cls.build_translate_parser().parse_args(global_argv)
                args = cls.build_command_parser().parse_args(rest)
                if args.command == "config":
                    return cls.config_command(args)
                if args.command == "setup":
                    return cls.setup_wizard()
                args.url = args.url or global_args.url
                args.token = args.token or global_args.token
                args.timeout = args.timeout or global_args.timeout or DOCTOR_TIMEOUT
                return cls.doctor(args)

            parser = cls.build_translate_parser()
            args = parser.parse_intermixed_args(argv)
            return cls.translate_command(args, parser)
        except KeyboardInterrupt:
            err_console.print("\n[bold yellow]Cancelled.[/]")
            return 130

    @classmethod
    def show_welcome(cls) -> None:
        console.print("👋 [bold]Welcome to DeepLX CLI![/]")
        console.print("\nIt looks like this is your first time using the tool.")
        console.print("Let's get you set up:")
        console.print(f"\n  [cyan]{APP_NAME} setup[/]")
        console.print("\nOr see all available commands:")
        console.print(f"\n  [cyan]{APP_NAME} --help[/]")

    @classmethod
    def translate_command(cls, args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
        """Translate the positional text and print the result."""
        config = ConfigStore.load()

        if not args.text:
            if config.is_empty():
                cls.show_welcome()
            else:
                parser.print_help()
            return 0

        text = " ".join(args.text)
        source_lang = LanguageHandler.normalize_code(args.source)
        target_lang = LanguageHandler.normalize_code(args.target)
        server_url, token = resolve_settings(config, args.url, args.token)

        if args.debug:
            err_console.print(
                f"[dim]Debug:[/] URL={escape(server_url)}, Source={source_lang}, "
                f"Target={target_lang}, HasToken={str(bool(token)).lower()}",
                soft_wrap=True, highlight=False,
            )

        try:
            with DeepLXClient(server_url, token, args.timeout or DEFAULT_TIMEOUT, args.debug) as client:
                result = client.translate(text, source_lang, target_lang)
        except ServerUnreachableError as e:
            err_console.print(escape(str(e)), soft_wrap=True, highlight=False)
            err_console.print(f"\n💡 First time? Run: [bold]{APP_NAME} setup[/]")
            return 1
        except DeepLXError as e:
            err_console.print(
                f"[bold red]Translation error:[/] {escape(str(e))}",
                soft_wrap=True, highlight=False,
            )
            return 1

        console.out(result.data, highlight=False)

        if args.alternatives and result.alternatives:
            console.print("\nAlternatives:")
            for i, alternative in enumerate(result.alternatives, start=1):
                console.print(f"{i}. {escape(alternative)}", soft_wrap=True, highlight=False)

        if args.debug:
            err_console.print(
                f"[dim]Debug:[/] Method={escape(result.method)}, "
                f"SourceLang={escape(result.source_lang)}, ID={result.id}",
                soft_wrap=True, highlight=False,
            )
        return 0

    @classmethod
    def config_command(cls, args: argparse.Namespace) -> int:
        if args.config_command == "set":
            return cls.set_config(args.url, args.token)
        if args.config_command == "show":
            return cls.show_config()
        args.config_parser.print_help()
        return 0

    @staticmethod
    def set_config(url: Optional[str], token: Optional[str]) -> int:
        """Update the persisted defaults with whichever values were given."""
        if not url and not token:
            err_console.print(
                "[bold yellow]Warning:[/] Nothing to set. Use --url and/or --token."
            )
            return 1

        config = ConfigStore.load()

        if url:
            config.default_url = url
            console.print(f"Set default URL to: {escape(url)}", highlight=False)
        if token:
            config.default_token = token
            console.print("Set default token")

        try:
            path = ConfigStore.save(config)
        except ConfigError as e:
            err_console.print(f"[bold red]Error:[/] {escape(str(e))}", soft_wrap=True)
            return 1

        console.print(f"[dim]Saved to {escape(str(path))}[/]", soft_wrap=True)
        return 0

    @staticmethod
    def show_config() -> int:
        """Print the persisted defaults; the token itself is never shown."""
        config = ConfigStore.load()

        try:
            path = str(ConfigStore.get_config_path())
        except ConfigError as e:
            path = f"unavailable ({e})"

        console.print("Current configuration:")
        console.print(f"  Config file: {escape(path)}", soft_wrap=True, highlight=False)
        console.print(
            f"  Default URL: {escape(config.default_url or '[not set]')}",
            soft_wrap=True, highlight=False,
        )
        token_state = "[configured]" if config.default_token else "[not set]"
        console.print(f"  Default Token: {escape(token_state)}", highlight=False)
        return 0

    @staticmethod
    def _save_setup(config: Config) -> int:
        try:
            ConfigStore.save(config)
        except ConfigError as e:
            console.print(f"\n[bold yellow]⚠️  Failed to save config:[/] {escape(str(e))}")
            return 1

        console.print("\n[bold green]✓ Configuration saved![/]")
        console.print("\nYou're all set! Try:")
        console.print(f'  {APP_NAME} "Hello world"', highlight=False)
        return 0

    @classmethod
    def setup_wizard(cls) -> int:
        """Interactive setup: find or choose a server, verify it, save the defaults."""
        console.print("[bold]🚀 DeepLX CLI Setup[/]")
        console.print("==================")
        console.print()

        console.print("Checking for local DeepLX server... ", end="")
        with DeepLXClient(DEFAULT_URL, timeout=SETUP_LOCAL_TIMEOUT) as local:
            try:
                local.check_connection()
                found = True
            except DeepLXError:
                found = False

            if found:
                console.print("[green]✓ Found![/]")
                try:
                    local.translate("test", "AUTO", "EN", probe=False)
                    return cls._save_setup(Config(default_url=DEFAULT_URL))
                except AuthenticationError:
                    console.print("\n[bold yellow]⚠️  Server requires authentication[/]")
                    token = cls.prompt("Enter your token (or press Enter to skip): ")
                    if token:
                        local.token = token
                        try:
                            local.translate("test", "AUTO", "EN", probe=False)
                            return cls._save_setup(
                                Config(default_url=DEFAULT_URL, default_token=token)
                            )
                        except DeepLXError as e:
                            console.print(f"[yellow]⚠️  Token verification failed:[/] {escape(str(e))}")
                except DeepLXError as e:
                    console.print(f"[yellow]⚠️  Test translation failed:[/] {escape(str(e))}")
            else:
                console.print("[red]✗ Not found[/]")
                console.print("\n📦 No local DeepLX server found.")

        console.print("\nWould you like to:")
        console.print("1. Start DeepLX with Docker (recommended)")
        console.print("2. Use a remote DeepLX server")
        console.print("3. Exit and set up manually")
        choice = cls.prompt("\nChoice (1-3): ")

        if choice == "1":
            console.print("\nTo start DeepLX with Docker, run:")
            console.print(f"\n  [cyan]{DEEPLX_DOCKER_COMMAND}[/]")
            console.print(f"\nThen run '{APP_NAME} setup' again.")
        elif choice == "2":
            return cls._setup_remote()
        elif choice == "3":
            console.print("\nTo set up manually:")
            console.print("1. Start a DeepLX server")
            console.print(f"2. Configure with: {APP_NAME} config set --url <server-url>", highlight=False)
            console.print("3. If needed, add: --token <your-token>", highlight=False)
        return 0

    @classmethod
    def _setup_remote(cls) -> int:
        server_url = cls.prompt("\nEnter the DeepLX server URL: ")
        if not server_url:
            console.print("No URL entered.")
            return 0

        with DeepLXClient(server_url, timeout=SETUP_REMOTE_TIMEOUT) as client:
            console.print("Testing connection... ", end="")
            try:
                client.check_connection()
            except DeepLXError as e:
                console.print("[red]✗ Failed[/]")
                console.print(f"Error: {escape(str(e))}", soft_wrap=True)
                return 0
            console.print("[green]✓ Connected[/]")

            needs_auth = cls.prompt("\nDoes this server require authentication? (y/N): ")
            token = ""
            if needs_auth.lower() in ("y", "yes"):
                token = cls.prompt("Enter your token: ")
            client.token = token

            console.print("\nTesting translation... ", end="")
            try:
                result = client.translate("Hello", "AUTO", "EN", probe=False)
            except DeepLXError as e:
                console.print("[red]✗ Failed[/]")
                console.print(f"Error: {escape(str(e))}", soft_wrap=True)
                return 0
            console.print(f"[green]✓ Success![/] Got: {escape(result.data)}")

        return cls._save_setup(Config(default_url=server_url, default_token=token))

    @classmethod
    def doctor(cls, args: argparse.Namespace) -> int:
        """Report configuration, environment, connectivity and a sample translation."""
        console.print("[bold]🔍 DeepLX CLI Diagnostic[/]")
        console.print("=======================")
        console.print()

        config = ConfigStore.load()
        console.print("Configuration:")
        if config.default_url:
            console.print(f"  [green]✓[/] Default URL: {escape(config.default_url)}", highlight=False)
        else:
            console.print(f"  [red]✗[/] Default URL: not set (using {DEFAULT_URL})", highlight=False)

        if config.default_token:
            console.print("  [green]✓[/] Default Token: configured")
        else:
            console.print("  ℹ Default Token: not set")

        console.print("\nEnvironment:")
        if os.environ.get("TOKEN"):
            console.print("  [green]✓[/] TOKEN: set")
        elif os.environ.get("DEEPLX_TOKEN"):
            console.print("  [green]✓[/] DEEPLX_TOKEN: set")
        else:
            console.print("  ℹ No token in environment")

        env_url = os.environ.get("DEEPLX_URL")
        if env_url:
            console.print(f"  [green]✓[/] DEEPLX_URL: {escape(env_url)}", highlight=False)

        server_url, token = resolve_settings(config, args.url, args.token)
        console.print(f"\nTesting connection to {escape(server_url)}:", highlight=False)

        with DeepLXClient(server_url, token, args.timeout) as client:
            console.print("  Checking connectivity... ", end="")
            try:
                client.check_connection()
            except DeepLXError as e:
                console.print("[red]✗ Failed[/]")
                console.print(f"  Error: {escape(str(e))}", soft_wrap=True)
                return 1
            console.print("[green]✓ OK[/]")

            console.print("  Testing translation... ", end="")
            try:
                result = client.translate("Hello", "AUTO", "EN", probe=False)
            except DeepLXError as e:
                console.print("[red]✗ Failed[/]")
                console.print(f"  Error: {escape(str(e))}", soft_wrap=True)
                if isinstance(e, AuthenticationError):
                    console.print("\n💡 Tip: This server requires authentication.")
                    console.print(
                        f"   Set a token with: {APP_NAME} config set --token <your-token>",
                        highlight=False,
                    )
                return 1

        console.print(f"[green]✓ OK[/] (got: {escape(result.data)})")
        console.print(f"  Method: {escape(result.method)}")
        console.print(f"  Source: {escape(result.source_lang)}")
        return 0


def main() -> None:
    """Console-script entry point."""
    sys.exit(TranslatorCLI.run())
