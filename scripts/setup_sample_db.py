"""Utility that launches a sample MySQL Docker container for dbprovider."""

from __future__ import annotations

import argparse
import subprocess
import sys
import time
from pathlib import Path

import pymysql

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dbprovider.config import CONFIG_FILE, ConnectionProfileConfig, load_config, save_config
from dbprovider.mysql import MysqlServiceProvider

DEFAULT_CONTAINER = "dbprovider-sample-db"
DEFAULT_PORT = 3307
DEFAULT_PASSWORD = "dbprovider"
DEFAULT_DB = "dbprovider_demo"
DEFAULT_USER = "dbprovider"
DOCKER_IMAGE = "mysql:8.4"
PROFILE_NAME = "Docker Sample"


def run(cmd: list[str], *, check: bool = True, **kwargs) -> subprocess.CompletedProcess[str]:
    print("$", " ".join(cmd))
    return subprocess.run(cmd, check=check, text=True, **kwargs)


def container_exists(name: str) -> bool:
    result = subprocess.run(
        ["docker", "ps", "-a", "--filter", f"name={name}", "--format", "{{.ID}}"],
        text=True,
        capture_output=True,
    )
    return bool(result.stdout.strip())


def start_container(name: str, port: int, password: str, database: str, user: str) -> None:
    if container_exists(name):
        print(f"Container '{name}' already exists. Reusing it.")
        run(["docker", "start", name], check=False)
        return
    run(
        [
            "docker",
            "run",
            "-d",
            "--name",
            name,
            "-e",
            f"MYSQL_ROOT_PASSWORD={password}",
            "-e",
            f"MYSQL_DATABASE={database}",
            "-e",
            f"MYSQL_USER={user}",
            "-e",
            f"MYSQL_PASSWORD={password}",
            "-p",
            f"{port}:3306",
            DOCKER_IMAGE,
        ]
    )


def wait_for_start(properties: dict[str, object], retries: int = 30, delay: float = 2.0) -> bool:
    """Poll with blocking connects until the server accepts the sample user."""

    provider = MysqlServiceProvider()
    for _ in range(retries):
        try:
            pool = provider.connect_sync(properties)
        except pymysql.err.OperationalError:
            time.sleep(delay)
            continue
        pool.close()
        return True
    return False


def update_config(port: int, user: str, database: str, password: str) -> None:
    config = load_config()
    if config.has_profile(PROFILE_NAME):
        print(f"Profile '{PROFILE_NAME}' already present in config; leaving as-is.")
        return
    profile = ConnectionProfileConfig(
        name=PROFILE_NAME,
        implementation="mysql",
        host="127.0.0.1",
        port=port,
        database=database,
        user=user,
        password=password,
    )
    save_config(config.with_profile(profile))
    print(f"Added '{PROFILE_NAME}' profile to {CONFIG_FILE}.")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--container", default=DEFAULT_CONTAINER, help="Docker container name")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Host port to expose MySQL on")
    parser.add_argument("--password", default=DEFAULT_PASSWORD, help="MySQL password")
    parser.add_argument("--database", default=DEFAULT_DB, help="Database name to create")
    parser.add_argument("--user", default=DEFAULT_USER, help="Database user")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or sys.argv[1:])
    try:
        start_container(args.container, args.port, args.password, args.database, args.user)
    except FileNotFoundError:
        print("Docker is not installed or not on PATH.")
        return 1
    properties = {
        "host": "127.0.0.1",
        "port": args.port,
        "database": args.database,
        "user": args.user,
        "password": args.password,
        "debug": False,
    }
    if not wait_for_start(properties):
        print("Warning: database did not accept connections; saving profile anyway.")
    update_config(args.port, args.user, args.database, args.password)
    print(f"Sample database is ready. Check it with: python -m dbprovider check '{PROFILE_NAME}'")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
