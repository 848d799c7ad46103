"""
Tests for the shared find_one/resolve behaviour of ContainerPort.
"""

from unittest.mock import patch

import pytest

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.exceptions import MultipleMatchesError, NotFoundError
from process_foundry.ports.container_port import CachePolicy, ContainerPort


class StaticContainer(ContainerPort):
    """Container whose find() returns a fixed list of instances."""

    def __init__(self, apps):
        self.apps = apps
        self.find_calls = 0

    def find(self, query):
        self.find_calls += 1
        return [app for app in self.apps if query.matches_name(app.name)]

    def forward(self, target, message):
        return ""

    def cached_apps(self):
        return list(self.apps)

    def get_name(self):
        return "static (1.0)"


class TestFindOne:
    """Test cases for ContainerPort.find_one."""

    def test_single_match_is_returned(self):
        web = AppInstance(name="web")
        container = StaticContainer([web, AppInstance(name="db")])

        assert container.find_one(AppQuery(name="web")) is web

    def test_no_match_raises_not_found(self):
        container = StaticContainer([AppInstance(name="db")])

        with pytest.raises(
            NotFoundError,
            match=r"No instances matching your query of web have been registered in static \(1.0\)",
        ):
            container.find_one(AppQuery(name="web"))

    def test_two_matches_raise_multiple_matches(self):
        container = StaticContainer(
            [AppInstance(name="psql", instance_id="a"), AppInstance(name="psql", instance_id="b")]
        )

        with pytest.raises(MultipleMatchesError, match="2 instances matching"):
            container.find_one(AppQuery(name="psql"))

    def test_find_all_does_not_relax_find_one(self):
        container = StaticContainer(
            [AppInstance(name="psql", instance_id="a"), AppInstance(name="psql", instance_id="b")]
        )

        with pytest.raises(MultipleMatchesError):
            container.find_one(AppQuery(name="psql", find_all=True))

    def test_errors_are_recoverable(self):
        assert NotFoundError.recoverable
        assert MultipleMatchesError.recoverable


class TestResolve:
    def test_resolve_returns_every_match_for_find_all(self):
        apps = [AppInstance(name="psql", instance_id="a"), AppInstance(name="psql", instance_id="b")]
        container = StaticContainer(apps)

        assert container.resolve(AppQuery(name="psql").with_find_all()) == apps

    def test_resolve_empty_find_all_is_not_an_error(self):
        container = StaticContainer([])
        assert container.resolve(AppQuery(name="psql", find_all=True)) == []

    def test_resolve_without_find_all_requires_one(self):
        container = StaticContainer([])
        with pytest.raises(NotFoundError):
            container.resolve(AppQuery(name="psql"))

    def test_default_cache_policy(self):
        assert StaticContainer([]).cache_policy is CachePolicy.ALWAYS_PROBE


class TestCacheIsFresh:
    """Test cases for the declared cache policy."""

    def test_uncached_policy_is_never_fresh(self):
        assert not StaticContainer([]).cache_is_fresh(0.0)

    def test_once_policy_is_always_fresh(self):
        container = StaticContainer([])
        container.cache_policy = CachePolicy.PROBE_ONCE

        assert container.cache_is_fresh(0.0)

    @patch("process_foundry.ports.container_port.time.monotonic", return_value=100.0)
    def test_ttl(self, _monotonic):
        container = StaticContainer([])
        container.cache_policy = CachePolicy.TTL
        container.cache_ttl = 30.0

        assert container.cache_is_fresh(80.0)
        assert not container.cache_is_fresh(60.0)
