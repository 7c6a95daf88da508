"""Entry point for ``python -m workspace_size``."""

from workspace_size.app.cli import cli

if __name__ == "__main__":
    cli()
