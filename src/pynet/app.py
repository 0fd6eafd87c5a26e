"""pynet - command line entry point."""

import logging
import sys

from pynet.report import write_metrics


def main() -> int:
    """Entry point for the pynet command: print the system report to stdout."""
    logging.basicConfig(stream=sys.stderr, level=logging.WARNING, format="%(message)s")
    write_metrics(sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
