"""Allow ``python -m goreload``."""

from goreload.cli.main import cli

if __name__ == "__main__":
    cli()
