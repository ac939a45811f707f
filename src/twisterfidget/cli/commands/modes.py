"""List the available modes."""

import click

from twisterfidget.modes import SELECT_MAP, build_default_modes


@click.command(name="modes")
def modes_command():
    """List registered modes and the knob that selects each one."""
    knobs = {name: knob for knob, name in SELECT_MAP.items()}
    modes = build_default_modes()
    photo_listed = False

    click.echo("Modes (knob on the select screen):\n")
    for mode in sorted(modes, key=lambda m: knobs.get(m.name, 99)):
        knob = knobs.get(mode.name)
        label = f"[{knob:>2}]" if knob is not None else "[--]"
        click.echo(f"  {label} {mode.name:<15} {mode.description}")
        photo_listed = photo_listed or mode.name == "photo"

    if not photo_listed:
        click.echo(f"  [{knobs['photo']:>2}] {'photo':<15} (disabled: set SLACK_TOKEN or --slack-token)")

    click.echo("\nHold any knob for 1.5s to return to the select screen.")
