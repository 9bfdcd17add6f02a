"""
Interactive CLI entrypoint for Quotes CLI.

Architectural role:
- Parses command-line arguments and loads `.env` configuration.
- Wires provider settings, backend, decoder, store, and console output.
- Delegates all interaction to `quotes_cli.core.acquisition_loop`.

Startup lifecycle:
1. Load `.env` (python-dotenv) and parse arguments.
2. Configure logging (DEBUG with `--verbose`, WARNING otherwise; stderr).
3. Resolve provider settings; a missing API key aborts with exit code 1.
4. Open the quote store and optionally seed history from it.
5. Run the acquisition loop until the user exits.

Exit codes:
- 0: user-initiated exit.
- 1: configuration, store initialization, or terminal-mode failure.
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from quotes_cli import __version__
from quotes_cli.api.output import RED, RESET, ConsoleOutput
from quotes_cli.core.acquisition_loop import AcquisitionLoop
from quotes_cli.core.errors import ConfigurationError, StoreError, TerminalModeError
from quotes_cli.core.types import SessionHistory
from quotes_cli.llm.client import create_backend
from quotes_cli.llm.provider_config import PROVIDERS, load_settings, resolve_db_path
from quotes_cli.storage.quote_store import QuoteStore
from quotes_cli.terminal.input_decoder import InputDecoder


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quotes-cli",
        description="Generate short quotes; press right arrow to save, left to discard.",
    )
    parser.add_argument("theme", nargs="?", default=None, help="Theme for the quotes")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show prompts, response headers, and debug logs",
    )
    parser.add_argument(
        "-b", "--backend",
        choices=sorted(PROVIDERS),
        default=None,
        help="Generation backend (default: $QUOTES_BACKEND or openai)",
    )
    parser.add_argument("--db", default=None, help="Path to the SQLite quote store")
    parser.add_argument(
        "--keep-context",
        action="store_true",
        help="Send previous prompts and replies with every request",
    )
    parser.add_argument(
        "--seed-history",
        type=int,
        default=0,
        metavar="N",
        help="Prime liked history with the N most recent stored quotes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # httpx/httpcore debug output is noise next to our own request logs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _fatal(message: str) -> int:
    print(f"{RED}{message}{RESET}", file=sys.stderr)
    return 1


def main(argv=None) -> int:
    """
    Run the interactive session and return the process exit code.

    Error handling strategy:
    - `ConfigurationError`, `StoreError` at startup, and `TerminalModeError`
      print a red message and return 1.
    - Everything recoverable is handled inside the loop.
    """
    load_dotenv()

    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = load_settings(args.backend)
    except ConfigurationError as exc:
        return _fatal(str(exc))

    logger.debug("Using backend %s with model %s", settings.name, settings.model)

    try:
        store = QuoteStore(resolve_db_path(args.db))
        history = SessionHistory(store.recent(args.seed_history))
    except StoreError as exc:
        return _fatal(str(exc))

    output = ConsoleOutput(color=sys.stdout.isatty())
    loop = AcquisitionLoop(
        backend=create_backend(settings, keep_context=args.keep_context),
        decoder=InputDecoder(),
        store=store,
        theme=args.theme,
        verbose=args.verbose,
        history=history,
        output=output,
    )

    try:
        return asyncio.run(loop.run())
    except KeyboardInterrupt:
        # SIGINT outside a key read (for example during a fetch).
        output.goodbye()
        return 0
    except (ConfigurationError, TerminalModeError) as exc:
        return _fatal(str(exc))
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
