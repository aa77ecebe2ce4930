"""Tests for DSN formatting."""

from __future__ import annotations

import pytest

from sqlpane.dsn import build_dsn, redacted_dsn
from sqlpane.models import ConnectionOptions, Flavor, UnknownFlavorError


def _split(dsn: str) -> tuple[str, set[str]]:
    base, _, query = dsn.partition("?")
    return base, set(query.split("&")) if query else set()


@pytest.mark.parametrize(
    ("options", "expected_base", "expected_query"),
    [
        (
            ConnectionOptions(
                Flavor.MYSQL,
                host="localhost",
                database="test",
                user="root",
                password="password",
                port=3306,
                additional_options={"tls": "preferred", "clientFoundRows": "", "parseTime": "false"},
            ),
            "root:password@tcp(localhost:3306)/test",
            {"clientFoundRows=true", "parseTime=false", "tls=preferred"},
        ),
        (ConnectionOptions(Flavor.MYSQL), "/", set()),
        (
            ConnectionOptions(Flavor.MYSQL, host="localhost", database="bar", user="john", password="doe", port=3306),
            "john:doe@tcp(localhost:3306)/bar",
            set(),
        ),
        (
            ConnectionOptions(Flavor.MYSQL, host="localhost", database="test", user="root", password="password"),
            "root:password@tcp(localhost)/test",
            set(),
        ),
        (
            ConnectionOptions(Flavor.MYSQL, user="root", password="password", port=3306),
            "root:password@/",
            set(),
        ),
        (
            ConnectionOptions(Flavor.MYSQL, host="/tmp/mysql.sock", user="root", port=3306),
            "root@unix(/tmp/mysql.sock)/",
            set(),
        ),
        (
            ConnectionOptions(Flavor.MYSQL, host="@/var/run/usbmuxd", user="root", port=3306),
            "root@unix(@/var/run/usbmuxd)/",
            set(),
        ),
    ],
)
def test_mysql_dsn(options: ConnectionOptions, expected_base: str, expected_query: set[str]) -> None:
    base, query = _split(build_dsn(options))

    assert base == expected_base
    assert query == expected_query


def test_mysql_dsn_has_no_query_marker_without_options() -> None:
    dsn = build_dsn(ConnectionOptions(Flavor.MYSQL, host="localhost", user="root"))

    assert "?" not in dsn


def test_postgres_dsn_with_all_options() -> None:
    options = ConnectionOptions(
        Flavor.POSTGRESQL,
        host="localhost",
        database="test",
        user="root",
        password="password",
        port=5432,
        additional_options={"sslmode": "verify-ca", "requiressl": ""},
    )

    parts = build_dsn(options).split(" ")

    assert set(parts) == {
        "host=localhost",
        "dbname=test",
        "user=root",
        "password=password",
        "port=5432",
        "sslmode=verify-ca",
        "requiressl=1",
    }


def test_postgres_dsn_drops_empty_values() -> None:
    options = ConnectionOptions(Flavor.POSTGRESQL, host="db.internal", user="app")

    assert set(build_dsn(options).split(" ")) == {"host=db.internal", "user=app"}


def test_postgres_dsn_is_empty_without_options() -> None:
    assert build_dsn(ConnectionOptions(Flavor.POSTGRESQL)) == ""


@pytest.mark.parametrize("flavor", [None, "oracle", ""])
def test_unknown_flavor_is_rejected(flavor: object) -> None:
    with pytest.raises(UnknownFlavorError):
        build_dsn(ConnectionOptions(flavor))  # type: ignore[arg-type]


def test_redacted_dsn_masks_password() -> None:
    options = ConnectionOptions(Flavor.MYSQL, host="localhost", user="root", password="hunter2")

    dsn = redacted_dsn(options)

    assert "hunter2" not in dsn
    assert dsn == "root:***@tcp(localhost)/"


@pytest.mark.parametrize(
    ("host", "transport"),
    [("", ""), ("localhost", "tcp"), ("10.0.0.4", "tcp"), ("/var/run/mysqld.sock", "unix"), ("@abstract", "unix")],
)
def test_transport_inferred_from_host(host: str, transport: str) -> None:
    assert ConnectionOptions(Flavor.MYSQL, host=host).transport == transport


@pytest.mark.parametrize("value", ["mysql", "MySQL", "postgres", "postgresql", "psql", Flavor.MYSQL])
def test_flavor_parse_accepts_aliases(value: object) -> None:
    assert isinstance(Flavor.parse(value), Flavor)


def test_flavor_parse_rejects_unknown() -> None:
    with pytest.raises(UnknownFlavorError):
        Flavor.parse("sqlite")


def test_mysql_dsn_escapes_database_as_path_segment() -> None:
    options = ConnectionOptions(Flavor.MYSQL, user="root", database="a,b;c!'()* d$&+:=@")

    assert build_dsn(options) == "root@/a%2Cb%3Bc%21%27%28%29%2A%20d$&+:=@"
