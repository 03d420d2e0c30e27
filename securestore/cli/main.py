"""CLI for the secure store."""

import json
from datetime import datetime, timezone
from pathlib import Path

import click
from dotenv import find_dotenv, load_dotenv

from securestore.config.exceptions import ConfigError
from securestore.secrets.exceptions import SecureStoreError
from securestore.utils.logging import setup_logging


def _load_config(ctx: click.Context):
    from securestore.config.loader import ConfigLoader

    loader = ConfigLoader(config_dir=ctx.obj["config_dir"])
    return loader.load(environment=ctx.obj["environment"])


def _open_store(ctx: click.Context):
    """Build the facade once per invocation."""
    from securestore.secrets import SecureStore

    if "store" not in ctx.obj:
        ctx.obj["store"] = SecureStore(_load_config(ctx))
    return ctx.obj["store"]


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _parse_properties(values: tuple) -> dict:
    properties = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'")
        properties[key] = value
    return properties


def _format_time(create_time_ms: int) -> str:
    created = datetime.fromtimestamp(create_time_ms / 1000, tz=timezone.utc)
    return created.isoformat(timespec="seconds")


@click.group()
@click.version_option(version="1.0.0", prog_name="securestore")
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="SECURESTORE_CONFIG_DIR",
    help="Directory holding securestore.yaml",
)
@click.option("--environment", "-e", default=None, help="Environment (dev/prod)")
@click.option("--log-level", default=None, help="Log level (default: WARNING)")
@click.pass_context
def cli(ctx: click.Context, config_dir, environment, log_level):
    """Secure Store CLI - namespaced secrets over pluggable backends."""
    load_dotenv(find_dotenv(usecwd=True))
    setup_logging(level=log_level or "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    ctx.obj["environment"] = environment


@cli.command()
@click.pass_context
def backends(ctx: click.Context):
    """List discovered backends (* marks the configured one)."""
    from securestore.secrets import BackendRegistry

    try:
        cfg = _load_config(ctx)
        found = BackendRegistry(
            extensions_dir=cfg.extensions_dir,
            entry_point_group=cfg.entry_point_group,
        ).get_all()
    except (ConfigError, SecureStoreError) as e:
        _fail(str(e))

    for name in sorted(found):
        marker = "*" if name == cfg.backend else " "
        click.echo(f"{marker} {name}")


@cli.command("list")
@click.argument("namespace")
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
@click.pass_context
def list_secrets(ctx: click.Context, namespace: str, as_json: bool):
    """List secret names and descriptions in a namespace."""
    try:
        secrets = _open_store(ctx).list_secure_data(namespace)
    except (ConfigError, SecureStoreError) as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps(secrets, indent=2, sort_keys=True))
        return

    for name in sorted(secrets):
        description = secrets[name]
        click.echo(f"{name}\t{description}" if description else name)


@cli.command()
@click.argument("namespace")
@click.argument("name")
@click.option("--metadata", is_flag=True, help="Show metadata instead of the value")
@click.pass_context
def get(ctx: click.Context, namespace: str, name: str, metadata: bool):
    """Print a secret value."""
    try:
        data = _open_store(ctx).get_secure_data(namespace, name)
    except (ConfigError, SecureStoreError) as e:
        _fail(str(e))

    if not metadata:
        click.echo(data.as_text())
        return

    meta = data.metadata
    click.echo(f"Name:        {meta.name}")
    click.echo(f"Description: {meta.description}")
    click.echo(f"Created:     {_format_time(meta.create_time_ms)}")
    for key in sorted(meta.properties):
        click.echo(f"  {key} = {meta.properties[key]}")


@cli.command()
@click.argument("namespace")
@click.argument("name")
@click.option("--data", default=None, help="Secret value (prompted when omitted)")
@click.option("--description", "-d", default="", help="Description of the entry")
@click.option(
    "--property", "-p", "props", multiple=True, help="Property as KEY=VALUE"
)
@click.pass_context
def put(ctx: click.Context, namespace, name, data, description, props):
    """Create or overwrite a secret."""
    properties = _parse_properties(props)
    if data is None:
        data = click.prompt("Value", hide_input=True, confirmation_prompt=True)

    try:
        _open_store(ctx).put_secure_data(namespace, name, data, description, properties)
    except (ConfigError, SecureStoreError) as e:
        _fail(str(e))

    click.echo(f"✓ Stored {namespace}/{name}")


@cli.command()
@click.argument("namespace")
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, namespace: str, name: str):
    """Delete a secret (succeeds if it does not exist)."""
    try:
        _open_store(ctx).delete_secure_data(namespace, name)
    except (ConfigError, SecureStoreError) as e:
        _fail(str(e))

    click.echo(f"✓ Deleted {namespace}/{name}")


@cli.command()
@click.pass_context
def health(ctx: click.Context):
    """Check health of the active backend."""
    try:
        store = _open_store(ctx)
    except (ConfigError, SecureStoreError) as e:
        _fail(str(e))

    if store.health_check():
        click.echo(f"✓ Backend '{store.backend_name}' healthy")
    else:
        _fail(f"backend '{store.backend_name}' unhealthy")


@cli.command("generate-key")
def generate_key():
    """Print a new key for the file backend."""
    from cryptography.fernet import Fernet

    click.echo(Fernet.generate_key().decode("ascii"))


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
