"""Command line entry point: parse flags, build the query engine, launch the TUI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import click

from .config import AppConfig, load_config
from .connections import ConnectionManager
from .models import ConnectionOptions, Flavor, UnknownFlavorError
from .query import QueryExecutor

LOG = logging.getLogger(__name__)


def parse_additional_options(values: Iterable[str]) -> dict[str, str]:
    """Parse `key=value,flag,...` strings; a key without `=` maps to ``."""

    options: dict[str, str] = {}
    for raw in values:
        for item in raw.split(","):
            item = item.strip()
            if not item:
                continue
            key, _, value = item.partition("=")
            options[key] = value
    return options


def configure_logging(path: Path, level: str = "INFO") -> None:
    """Send the package's logs to a file; the TUI owns stdout and stderr."""

    logger = logging.getLogger("sqlpane")
    for handler in list(logger.handlers):
        if getattr(handler, "_sqlpane", False):
            logger.removeHandler(handler)
            handler.close()
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    handler._sqlpane = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level.upper())


def build_options(config: AppConfig, **overrides: object) -> ConnectionOptions:
    """Merge flags over the config file into validated connection options."""

    options = config.connection.to_options(**overrides)  # type: ignore[arg-type]
    options.validate()
    return options


def launch(options: ConnectionOptions, config: AppConfig) -> None:
    """Wire the engine into the Textual app and run it until exit."""

    from .app import SqlpaneApp

    manager = ConnectionManager(options, connect_timeout=config.connection.connect_timeout)
    executor = QueryExecutor(manager)
    SqlpaneApp(
        executor,
        history_size=config.history_size,
        result_limit=config.result_limit,
    ).run()


@click.command(context_settings={"help_option_names": ["--help"]})
@click.option("--mysql", "flavor", flag_value=Flavor.MYSQL.value, help="Specify for MySQL database.")
@click.option("--psql", "--postgres", "flavor", flag_value=Flavor.POSTGRESQL.value, help="Specify for PostgreSQL database.")
@click.option("-h", "--host", default=None, help="Database host, ex: localhost, remote.example.com, /tmp/mysql.sock.")
@click.option("-d", "--database", default=None, help="Database name to connect to.")
@click.option("-u", "--user", default=None, help="User name for logging into the database.")
@click.option("-p", "--password", default=None, help="Password for logging into the database.")
@click.option("-P", "--port", type=click.IntRange(0, 65535), default=None, help="Port, defaults based on MySQL/PostgreSQL default port.")
@click.option("-s", "--safe", "safe_mode", is_flag=True, default=None, help="MySQL option to prevent unintended delete/updates.")
@click.option(
    "--additional-options",
    multiple=True,
    metavar="KEY=VALUE,...",
    help="Additional driver options, ex: --additional-options=foo=bar,bar=baz. A bare key means true.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Location of the config.toml file.",
)
@click.pass_context
def main(
    ctx: click.Context,
    flavor: str | None,
    host: str | None,
    database: str | None,
    user: str | None,
    password: str | None,
    port: int | None,
    safe_mode: bool | None,
    additional_options: tuple[str, ...],
    config_file: Path | None,
) -> None:
    """An interactive SQL client for MySQL and PostgreSQL.

    \b
    Examples:
      - sqlpane --postgres -h localhost -u postgres -d app
      - sqlpane --mysql -h /tmp/mysql.sock -u root -s
    """

    config = load_config(config_file)
    try:
        options = build_options(
            config,
            flavor=flavor,
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            safe_mode=safe_mode,
            additional_options=parse_additional_options(additional_options),
        )
    except UnknownFlavorError as exc:
        click.echo(f"Unable to proceed with specified arguments: \n{exc}\n", err=True)
        click.echo(ctx.get_help(), err=True)
        ctx.exit(2)

    configure_logging(config.log_path, config.log_level)
    LOG.info("Starting sqlpane", extra={"flavor": options.flavor.value})  # type: ignore[union-attr]
    launch(options, config)


__all__ = ["build_options", "configure_logging", "launch", "main", "parse_additional_options"]
