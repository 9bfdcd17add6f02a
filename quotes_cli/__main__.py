"""Allow `python -m quotes_cli`."""

import sys

from quotes_cli.api.cli import main


if __name__ == "__main__":
    sys.exit(main())
