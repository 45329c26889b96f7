"""Entry-point for launching the AI Vault console game."""
from __future__ import annotations

import logging

from .presentation.cli.app import main as cli_main
from .presentation.cli.render import debug_enabled

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    """WARNING and above by default; everything when AIVAULT_DEBUG=1."""
    logging.basicConfig(level=logging.DEBUG if debug_enabled() else logging.WARNING, format=_LOG_FORMAT)


def main() -> None:
    configure_logging()
    cli_main()


if __name__ == "__main__":
    main()
