"""
Tests for the adapter registry.
"""

from unittest.mock import MagicMock

import pytest

from process_foundry.adapters.compose.docker_compose import DockerCompose
from process_foundry.adapters.pg_basebackup.pg_basebackup import PgBaseBackup
from process_foundry.adapters.shell.bash_shell import BashShell
from process_foundry.entities.app_instance import AppInstance
from process_foundry.exceptions import (
    ConfigurationError,
    DuplicateKeyError,
    NotFoundError,
)
from process_foundry.registry import (
    ActsAs,
    AdapterRegistry,
    AppDefinition,
    default_registry,
)
from process_foundry.topology import ContainerTree


class TestAdapterRegistry:
    """Test cases for AdapterRegistry."""

    def test_register_and_build(self, mock_logger):
        registry = AdapterRegistry(mock_logger)
        factory = MagicMock(return_value="adapter")
        registry.register_factory(AppDefinition("psql", ActsAs.APP), factory)
        instance = AppInstance(name="psql")

        assert registry.build(instance, parent=None) == "adapter"
        factory.assert_called_once_with(instance, None)

    def test_lookup_is_case_insensitive_and_uses_aliases(self, mock_logger):
        registry = AdapterRegistry(mock_logger)
        registry.register_factory(
            AppDefinition("postgres", ActsAs.APP, aliases=("pg",)), MagicMock()
        )

        assert registry.get_definition("PG").name == "postgres"
        assert registry.get_definition("Postgres").name == "postgres"

    def test_duplicate_alias_is_rejected(self, mock_logger):
        registry = AdapterRegistry(mock_logger)
        registry.register_factory(AppDefinition("bash", aliases=("sh",)), MagicMock())

        with pytest.raises(DuplicateKeyError, match="'sh' is already used by bash"):
            registry.register_factory(AppDefinition("dash", aliases=("SH",)), MagicMock())
        assert len(registry) == 1

    def test_unknown_adapter(self, mock_logger):
        registry = AdapterRegistry(mock_logger)

        with pytest.raises(NotFoundError, match="No adapter has been registered for zsh"):
            registry.build(AppInstance(name="zsh"))

    def test_build_with_explicit_adapter_name(self, mock_logger):
        registry = AdapterRegistry(mock_logger)
        factory = MagicMock()
        registry.register_factory(AppDefinition("docker-container"), factory)

        registry.build(AppInstance(name="db"), adapter="docker-container")

        factory.assert_called_once()

    def test_build_rejects_unhandled_version(self, mock_logger):
        registry = AdapterRegistry(mock_logger)
        registry.register_factory(
            AppDefinition("docker-compose", works_with=">=1.25,<2"), MagicMock()
        )

        with pytest.raises(ConfigurationError, match="does not include docker-compose \\(2.5.0\\)"):
            registry.build(AppInstance(name="docker-compose", version="2.5.0"))

    def test_build_accepts_unknown_version(self, mock_logger):
        registry = AdapterRegistry(mock_logger)
        factory = MagicMock()
        registry.register_factory(AppDefinition("docker-compose", works_with=">=1.25"), factory)

        registry.build(AppInstance(name="docker-compose"))

        factory.assert_called_once()


class TestDefaultRegistry:
    def test_summary(self, executor, mock_logger):
        registry = default_registry(executor, logger=mock_logger)

        assert len(registry) == 5
        assert str(registry) == (
            "Registry has 5 factories loaded, 3 usable as containers and 4 as applications"
        )

    def test_builds_real_adapters(self, executor, shell, mock_logger):
        registry = default_registry(executor, logger=mock_logger)

        assert isinstance(registry.build(AppInstance(name="sh")), BashShell)
        compose = registry.build(AppInstance(name="compose"), parent=shell)
        assert isinstance(compose, DockerCompose)
        assert compose.parent is shell
        assert isinstance(registry.build(AppInstance(name="pg_basebackup")), PgBaseBackup)
        assert registry.get_definition("postgresql").acts_as is ActsAs.APP


class TestRegistryWithTree:
    """Built containers are registered in the container tree."""

    def test_containers_are_registered_below_parent(self, executor, shell, mock_logger):
        tree = ContainerTree(mock_logger)
        root = tree.add(shell)
        registry = default_registry(executor, logger=mock_logger, tree=tree)

        compose = registry.build(AppInstance(name="docker-compose"), parent=shell)
        registry.build(AppInstance(name="pg_basebackup"), parent=shell)

        assert tree.children_of(root) == [compose]
        assert len(tree) == 2

    def test_parent_outside_tree(self, executor, shell, mock_logger):
        registry = default_registry(
            executor, logger=mock_logger, tree=ContainerTree(mock_logger)
        )

        with pytest.raises(NotFoundError, match="is not part of the container tree"):
            registry.build(AppInstance(name="docker-compose"), parent=shell)

    def test_compose_children_follow_into_tree(
        self, executor, shell, compose_config, mock_logger
    ):
        tree = ContainerTree(mock_logger)
        tree.add(shell)
        registry = default_registry(executor, logger=mock_logger, tree=tree)
        compose = registry.build(AppInstance(name="docker-compose"), parent=shell)

        configured = compose.with_config(compose_config)
        db = configured.get_container("db")

        assert tree.id_of(compose) is None
        assert tree.route(db) == [db, configured, shell]
        assert [node["name"] for node in tree.to_dict()["nodes"]] == [
            "bash (Unknown Version)",
            configured.get_name(),
            db.get_name(),
        ]
