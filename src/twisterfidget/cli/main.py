"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from twisterfidget import __version__

from .commands import config, midi_group, modes_command

logger = logging.getLogger(__name__)


def default_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "twisterfidget-debug.log"
    return Path.home() / ".twisterfidget" / "logs" / "twisterfidget.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging in the current directory
        log_file: Custom log file path (optional)
        log_level: Log level used together with --log-file

    Returns:
        Path of the log file
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Override with explicit log level if a log file is given
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = default_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Keeps last 5 files, max 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__, prog_name="twisterfidget")
@click.option("--mode", "-m", type=str, default=None, help="Mode to start in (default: mode_select)")
@click.option("--long-press-ms", type=click.IntRange(min=1), default=None, help="Hold time that returns to mode select")
@click.option("--device", type=str, default=None, help="MIDI port name to look for")
@click.option("--slack-token", envvar="SLACK_TOKEN", default=None, help="Slack token enabling photo mode")
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: ~/.twisterfidget/config.json)",
)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v: INFO, -vv: DEBUG)")
@click.option("--debug", is_flag=True, help="Enable debug mode (DEBUG level, logs to ./twisterfidget-debug.log)")
@click.option("--log-file", type=click.Path(path_type=Path), default=None, help="Custom log file path")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level used with --log-file (default: INFO)",
)
def cli(
    ctx,
    mode: Optional[str],
    long_press_ms: Optional[int],
    device: Optional[str],
    slack_token: Optional[str],
    config_file: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str,
):
    """
    Twisterfidget - LED games and toys for the Midi Fighter Twister.

    Starts on the mode select screen: each lit knob starts a mode.
    Hold any knob for 1.5 seconds to come back.

    \b
    Examples:
      # Run with defaults
      twisterfidget

      # Start straight in the memory game
      twisterfidget --mode simon

      # Enable photo mode
      SLACK_TOKEN=xoxp-... twisterfidget

      # List MIDI ports
      twisterfidget midi list
    """
    if ctx.invoked_subcommand is not None:
        return

    from twisterfidget.app import FidgetApp
    from twisterfidget.exceptions import format_error_for_display
    from twisterfidget.models import AppConfig

    log_path = setup_logging(verbose, debug, log_file, log_level)
    logger.info("Starting twisterfidget")

    app = None
    try:
        cfg = AppConfig.load_or_default(config_file)

        overrides: dict = {}
        if mode:
            overrides["start_mode"] = mode
        if long_press_ms:
            overrides["long_press_ms"] = long_press_ms
        if device:
            overrides["device_name"] = device
        if overrides:
            cfg = cfg.model_copy(update=overrides)
        if slack_token:
            cfg = cfg.model_copy(update={"photo": cfg.photo.model_copy(update={"token": slack_token})})

        app = FidgetApp(cfg)
        click.echo(f"Waiting for '{cfg.device_name}'... press Ctrl+C to quit", err=True)
        app.run()

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running application")

        user_message, recovery_hint = format_error_for_display(e)

        click.echo("\n" + "=" * 70, err=True)
        click.echo(f"ERROR: {user_message}", err=True)
        click.echo("=" * 70, err=True)
        if recovery_hint:
            click.echo(f"\n{recovery_hint}", err=True)
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)

        sys.exit(1)
    finally:
        if app is not None:
            app.stop()


cli.add_command(midi_group)
cli.add_command(modes_command)
cli.add_command(config)

if __name__ == "__main__":
    cli()
