"""Logging setup for the CLI."""

import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> int:
    # stderr only: `filevault stream` writes plaintext to stdout
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", stream=sys.stderr)
    logging.getLogger("filevault").setLevel(level)
    return level
