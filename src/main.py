"""
Main entry point for running the LFS integrity checker.
"""

import sys

from orchestrator.main import main


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
