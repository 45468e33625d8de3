"""Command line entry for NoticePack document tools."""

import sys

from cli.render import main as run_cli


def main() -> None:
    """Run the NoticePack CLI."""
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
