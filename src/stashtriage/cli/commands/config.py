from dataclasses import replace

import click

from stashtriage.core.context import StashTriageContext
from stashtriage.core.global_config import (
    BOOLEAN_FIELDS,
    CONFIG_FIELDS,
    TriageConfig,
    global_config_path,
    save_global_config,
)


def _format_value(value: str | bool) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return value


def _parse_boolean_value(value: str, field_name: str) -> bool:
    """Parse a boolean value from a string.

    Args:
        value: The string value to parse ("true" or "false", case-insensitive)
        field_name: The name of the field being set (for error messages)

    Returns:
        The parsed boolean value

    Raises:
        SystemExit: If the value is not "true" or "false"
    """
    if value.lower() not in ("true", "false"):
        click.echo(f"Invalid boolean value for {field_name}: {value}", err=True)
        raise SystemExit(1)
    return value.lower() == "true"


def _update_config_field(current_config: TriageConfig, field_name: str, value: str) -> TriageConfig:
    """Return a new TriageConfig with one field replaced.

    Raises:
        SystemExit: If the field name or the value is invalid
    """
    if field_name not in CONFIG_FIELDS:
        click.echo(f"Invalid config key: {field_name}", err=True)
        raise SystemExit(1)

    if field_name in BOOLEAN_FIELDS:
        return replace(current_config, **{field_name: _parse_boolean_value(value, field_name)})

    if not value:
        click.echo(f"Value for {field_name} must not be empty", err=True)
        raise SystemExit(1)
    return replace(current_config, **{field_name: value})


@click.group("config")
def config_group() -> None:
    """Manage stashtriage configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: StashTriageContext) -> None:
    """Print a list of configuration keys and values."""
    click.echo(click.style(f"Configuration ({global_config_path()}):", bold=True))
    for field_name in CONFIG_FIELDS:
        click.echo(f"  {field_name}={_format_value(getattr(ctx.config, field_name))}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: StashTriageContext, key: str) -> None:
    """Print the value of a given configuration key."""
    if key not in CONFIG_FIELDS:
        click.echo(f"Invalid key: {key}", err=True)
        raise SystemExit(1)
    click.echo(_format_value(getattr(ctx.config, key)))


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: StashTriageContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key."""
    new_config = _update_config_field(ctx.config, key, value)
    save_global_config(new_config)
    click.echo(f"Set {key}={_format_value(getattr(new_config, key))}")
