"""Ephemeral Postgres container fixtures for integration tests."""

from __future__ import annotations

import os
import socket
import subprocess
import time
from collections.abc import Iterator
from dataclasses import dataclass

import pytest
from sqlalchemy import create_engine

from packages.guard_core.migrations import run_startup_migrations
from packages.guard_shared.config import GuardSettings
from resources.substrates.postgres.config import resolve_postgres_settings
from tests.integration.helpers import real_provider_tests_enabled

_POSTGRES_IMAGE = os.getenv("WORKFLOWGUARD_TEST_POSTGRES_IMAGE", "postgres:16")
_POSTGRES_URL_ENV = "WORKFLOWGUARD_COMPONENTS__SUBSTRATE__POSTGRES__URL"
_CREDENTIAL = "workflowguard"


@dataclass(frozen=True, slots=True)
class RunningContainer:
    """Lightweight handle for a running temporary Docker container."""

    container_id: str
    host: str
    port: int


def _run_command(*args: str) -> subprocess.CompletedProcess[str]:
    """Execute one command and return captured stdout/stderr."""
    return subprocess.run(args, check=True, capture_output=True, text=True)


def _docker_available() -> bool:
    """Return True when docker CLI is callable in the current environment."""
    try:
        _run_command("docker", "version")
    except (FileNotFoundError, subprocess.CalledProcessError):
        return False
    return True


def _parse_published_port(port_output: str) -> tuple[str, int]:
    """Parse ``docker port`` output into host and integer port."""
    line = port_output.strip().splitlines()[0].strip()
    host, port = line.rsplit(":", maxsplit=1)
    return host, int(port)


def _wait_for_tcp(host: str, port: int, *, timeout_seconds: float = 30.0) -> None:
    """Wait until one TCP endpoint accepts a connection or time out."""
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((host, port), timeout=0.5):
                return
        except OSError:
            time.sleep(0.2)
    raise TimeoutError(f"timed out waiting for TCP endpoint {host}:{port}")


def _wait_for_postgres_ready(dsn: str, *, timeout_seconds: float = 60.0) -> None:
    """Wait until Postgres accepts stable SQL connections."""
    deadline = time.monotonic() + timeout_seconds
    while time.monotonic() < deadline:
        engine = create_engine(dsn)
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
            return
        except Exception:  # noqa: BLE001
            time.sleep(0.2)
        finally:
            engine.dispose()
    raise TimeoutError("timed out waiting for Postgres readiness")


def _start_postgres() -> RunningContainer:
    """Start one detached Postgres container and return its mapped endpoint."""
    run_result = _run_command(
        "docker",
        "run",
        "--detach",
        "--rm",
        "--publish",
        "127.0.0.1::5432",
        "--env",
        f"POSTGRES_USER={_CREDENTIAL}",
        "--env",
        f"POSTGRES_PASSWORD={_CREDENTIAL}",
        "--env",
        f"POSTGRES_DB={_CREDENTIAL}",
        _POSTGRES_IMAGE,
    )
    container_id = run_result.stdout.strip()
    port_result = _run_command("docker", "port", container_id, "5432/tcp")
    host, port = _parse_published_port(port_result.stdout)
    _wait_for_tcp(host, port)
    return RunningContainer(container_id=container_id, host=host, port=port)


def _stop_container(container_id: str) -> None:
    """Stop one running container; teardown failures are not test failures."""
    subprocess.run(
        ("docker", "stop", container_id),
        check=False,
        capture_output=True,
        text=True,
    )


@pytest.fixture(scope="session")
def postgres_dsn() -> Iterator[str]:
    """Yield one temporary Postgres DSN for integration tests."""
    if not real_provider_tests_enabled():
        pytest.skip("real-provider integration tests disabled")
    if not _docker_available():
        pytest.skip("docker unavailable for integration tests")
    container = _start_postgres()
    dsn = (
        f"postgresql+psycopg://{_CREDENTIAL}:{_CREDENTIAL}"
        f"@{container.host}:{container.port}/{_CREDENTIAL}"
    )
    try:
        _wait_for_postgres_ready(dsn)
        yield dsn
    finally:
        _stop_container(container.container_id)


@pytest.fixture(scope="session")
def integration_settings(postgres_dsn: str) -> GuardSettings:
    """Return settings bound to the temporary Postgres instance."""
    return GuardSettings(
        components={"substrate": {"postgres": {"url": postgres_dsn}}}  # type: ignore[arg-type]
    )


@pytest.fixture(scope="session")
def migrated_integration_settings(integration_settings: GuardSettings) -> GuardSettings:
    """Run service migrations against temporary Postgres and return settings."""
    postgres_url = resolve_postgres_settings(integration_settings).url

    # Alembic env modules load settings from the environment.
    previous = os.environ.get(_POSTGRES_URL_ENV)
    os.environ[_POSTGRES_URL_ENV] = postgres_url
    try:
        run_startup_migrations(settings=integration_settings)
    finally:
        if previous is None:
            os.environ.pop(_POSTGRES_URL_ENV, None)
        else:
            os.environ[_POSTGRES_URL_ENV] = previous
    return integration_settings
