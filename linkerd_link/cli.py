#!/usr/bin/env python3
"""
linkerd-link provider CLI

Command-line entry point. When the first argument is the private wrapper
flag the process only runs the manifest generator on behalf of a parent
provider process; otherwise it is the provider itself.
"""

import json
import sys
from pathlib import Path
from typing import List, Optional

import click
from dotenv import load_dotenv

from .config.loader import ConfigLoader
from .constants import INTERNAL_INVOKE_FLAG
from .exceptions import ConfigError
from .logging_config import configure_logging
from .pipeline.generator import run_generator_as_child
from .schema import package_schema
from .version import __version__


@click.group()
@click.option(
    "--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)"
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the YAML configuration file",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], config_path: Optional[Path]) -> None:
    """linkerd-link - lifecycle provider for linkerd multicluster links."""
    load_dotenv()
    ctx.ensure_object(dict)
    loader = ConfigLoader(config_path)
    try:
        config = loader.load()
        config = loader.merge_cli_args(config, {"log_level": log_level})
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    configure_logging(config.log_level, config.log_format.value)
    ctx.obj["config"] = config
    ctx.obj["loader"] = loader


@cli.command()
@click.option("--host", default=None, help="Bind host")
@click.option("--port", type=int, default=None, help="Bind port (0 = ephemeral)")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Serve the provider verbs over HTTP."""
    import uvicorn

    from .provider import LinkProvider
    from .server import create_app

    loader: ConfigLoader = ctx.obj["loader"]
    try:
        config = loader.merge_cli_args(
            ctx.obj["config"], {"server": {"host": host, "port": port}}
        )
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    app = create_app(LinkProvider(config))
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
    )


@cli.command()
@click.option("--version", "schema_version", default=__version__, help="Package version")
def schema(schema_version: str) -> None:
    """Print the package schema as JSON."""
    click.echo(json.dumps(package_schema(schema_version), indent=2, sort_keys=True))


@cli.command()
def version() -> None:
    """Print the provider version."""
    click.echo(__version__)


def main(argv: Optional[List[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == INTERNAL_INVOKE_FLAG:
        sys.exit(run_generator_as_child(argv[1:]))
    cli.main(args=argv, prog_name="linkerd-link")


if __name__ == "__main__":
    main()
