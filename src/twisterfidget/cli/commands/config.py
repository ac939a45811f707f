"""Configuration commands."""

import json
import logging
from pathlib import Path

import click

from twisterfidget.exceptions import ConfigurationError, format_error_for_display
from twisterfidget.models import DEFAULT_CONFIG_PATH, AppConfig
from twisterfidget.utils import PydanticPersistence

logger = logging.getLogger(__name__)

config_path_option = click.option(
    "--path",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Config file (default: {DEFAULT_CONFIG_PATH})",
)


@click.group(name="config")
def config():
    """Show and manage the configuration file."""
    pass


@config.command(name="path")
@config_path_option
def config_path_cmd(config_path: Path | None):
    """Print the configuration file location."""
    click.echo(str(config_path or DEFAULT_CONFIG_PATH))


@config.command(name="show")
@config_path_option
def show(config_path: Path | None):
    """Display the effective configuration (token masked)."""
    try:
        cfg = AppConfig.load_or_default(config_path)
    except ConfigurationError as e:
        message, hint = format_error_for_display(e)
        click.echo(f"ERROR: {message}", err=True)
        if hint:
            click.echo(hint, err=True)
        raise SystemExit(1) from e

    data = json.loads(cfg.model_dump_json())
    if data["photo"]["token"]:
        data["photo"]["token"] = "****"
    click.echo(json.dumps(data, indent=2))


@config.command(name="validate")
@config_path_option
def validate(config_path: Path | None):
    """Validate the configuration file."""
    path = config_path or DEFAULT_CONFIG_PATH
    is_valid, error = PydanticPersistence.validate_json(path, AppConfig)
    if is_valid:
        click.echo(f"[OK] {path}")
        return
    click.echo(f"[FAIL] {error}", err=True)
    raise SystemExit(1)


@config.command(name="reset")
@config_path_option
@click.confirmation_option(prompt="Reset the configuration to defaults?")
def reset(config_path: Path | None):
    """Overwrite the configuration file with defaults (a .bak copy is kept)."""
    path = config_path or DEFAULT_CONFIG_PATH
    AppConfig().save(path)
    logger.info(f"Reset configuration at {path}")
    click.echo(f"Configuration reset: {path}")
