"""Main entry point for twisterfidget."""

from twisterfidget.cli.main import cli

if __name__ == "__main__":
    cli()
