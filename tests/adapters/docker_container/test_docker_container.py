"""
Tests for DockerContainer, including multi-hop routing through compose and the shell.
"""

import pytest

from process_foundry.adapters.docker_container.docker_container import (
    DockerContainer,
    Status,
)
from process_foundry.adapters.pg_basebackup.pg_basebackup import (
    BackupOptions,
    PgBaseBackup,
)
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.entities.message import CommandMessage
from process_foundry.exceptions import NotConfiguredError, NotFoundError, RemoteError

COMPOSE = "/usr/bin/docker-compose"
COMPOSE_FILE = "/srv/app/docker-compose.yml"
IN_DB = (COMPOSE, "-f", COMPOSE_FILE, "exec", "-T")
TOOL = "/usr/lib/postgresql/12/bin/pg_basebackup"


def which_in_db(name):
    return (*IN_DB, "db", "sh", "-c", f"command -v {name}")


class TestDockerContainer:
    """Test cases for the DockerContainer adapter."""

    def test_find_looks_inside_through_compose(self, compose, executor):
        executor.responses[which_in_db("pg_basebackup")] = TOOL + "\n"
        db = compose.get_container("db")

        tool = db.find_one(AppQuery(name="pg_basebackup"))

        assert tool.get_command_path() == TOOL
        assert tool.cli.container is db
        assert db.status is Status.UP

    def test_find_is_cached(self, compose, executor):
        executor.responses[which_in_db("pg_basebackup")] = TOOL + "\n"
        db = compose.get_container("db")
        db.find(AppQuery(name="pg_basebackup"))
        calls = len(executor.calls)

        db.find(AppQuery(name="pg_basebackup"))

        assert len(executor.calls) == calls
        assert [app.name for app in db.cached_apps()] == ["pg_basebackup"]

    def test_cache_follows_looked_up_names(self, compose, executor):
        executor.responses[which_in_db("postgresql")] = "/usr/bin/postgresql\n"
        executor.responses[which_in_db("psql13")] = "/opt/psql13\n"
        db = compose.get_container("db")

        assert len(db.find(AppQuery(name="postgres", aliases=("postgresql",)))) == 1
        assert db.find(AppQuery(name="postgres")) == []

        db.find(AppQuery(name="psql"))
        wider = db.find(AppQuery(name="psql", aliases=("psql13",)))
        assert [app.get_command_path() for app in wider] == ["/opt/psql13"]

    def test_find_nothing(self, compose):
        db = compose.get_container("db")

        assert db.find(AppQuery(name="pg_basebackup")) == []
        assert db.status is Status.DOWN

    def test_lookup_failure_without_exit_code_propagates(self, compose, executor):
        executor.responses[which_in_db("psql")] = RemoteError("docker daemon gone")
        db = compose.get_container("db")

        with pytest.raises(RemoteError, match="docker daemon gone"):
            db.find(AppQuery(name="psql"))

    def test_without_parent(self):
        db = DockerContainer(AppInstance(name="db"))

        with pytest.raises(NotConfiguredError, match="no orchestrator"):
            db.forward(AppInstance(name="psql"), CommandMessage.build("psql"))
        with pytest.raises(NotConfiguredError):
            db.find(AppQuery(name="psql"))

    def test_forward_rejects_foreign_target(self, compose, shell):
        db = compose.get_container("db")
        elsewhere = AppInstance(name="psql").set_command_path("/usr/bin/psql", shell)

        with pytest.raises(NotFoundError, match="is not inside"):
            db.forward(elsewhere, CommandMessage.build("psql"))


class TestRouting:
    """A command produces the same output however many containers it passes."""

    def test_backup_through_container_compose_and_shell(self, compose, executor):
        executor.responses[which_in_db("pg_basebackup")] = TOOL + "\n"
        backup_argv = (*IN_DB, "--user", "postgres", "db", TOOL, "-D", "/backup")
        executor.responses[backup_argv] = "backup done\n"

        db = compose.get_container("db")
        tool = PgBaseBackup(db.find_one(AppQuery(name="pg_basebackup")), parent=db)
        output = tool.run(BackupOptions(pgdata="/backup"))

        assert output == "backup done\n"
        assert executor.calls[-1]["argv"] == list(backup_argv)

    def test_output_matches_direct_shell_execution(self, compose, shell, executor):
        executor.responses[(TOOL, "-D", "/backup")] = "backup done\n"
        executor.responses[which_in_db("pg_basebackup")] = TOOL + "\n"
        executor.responses[
            (*IN_DB, "--user", "postgres", "db", TOOL, "-D", "/backup")
        ] = "backup done\n"
        options = BackupOptions(pgdata="/backup")

        local = PgBaseBackup(
            AppInstance(name="pg_basebackup").set_command_path(TOOL, shell), parent=shell
        )
        db = compose.get_container("db")
        nested = PgBaseBackup(db.find_one(AppQuery(name="pg_basebackup")), parent=db)

        assert local.run(options) == nested.run(options)
