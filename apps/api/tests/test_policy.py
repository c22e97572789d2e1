import random

import pytest

from dashboard_api.schemas.container import BulkActionRequest
from dashboard_api.services.policy import DEFAULT_PROTECTED_CONTAINERS, ProtectionPolicy, parse_protected_names


@pytest.fixture
def inventory(summary_factory):
    return [
        summary_factory("id-1", "web-1", cluster="web"),
        summary_factory("id-2", "Web-2", cluster="web"),
        summary_factory("id-3", "db", state="exited"),
        summary_factory("id-4", "kz-dashboard-api", cluster="kz"),
        summary_factory("id-5", "worker_a", cluster="worker"),
    ]


class TestParseProtectedNames:
    def test_trims_lowercases_and_drops_empty_entries(self):
        assert parse_protected_names(" Foo, ,bar ,,BAZ") == frozenset({"foo", "bar", "baz"})

    def test_none_is_empty(self):
        assert parse_protected_names(None) == frozenset()

    def test_from_csv_falls_back_to_default_set(self):
        assert ProtectionPolicy.from_csv("").protected_names == DEFAULT_PROTECTED_CONTAINERS
        assert ProtectionPolicy.from_csv(" , ").protected_names == DEFAULT_PROTECTED_CONTAINERS

    def test_from_csv_replaces_default_set(self):
        policy = ProtectionPolicy.from_csv("traefik")
        assert policy.is_protected("Traefik")
        assert not policy.is_protected("kz-dashboard-api")


class TestSelectTargets:
    def test_include_all_excludes_protected(self, inventory):
        policy = ProtectionPolicy()

        targets = policy.select_targets(inventory, BulkActionRequest(include_all=True))

        assert [c.id for c in targets] == ["id-1", "id-2", "id-3", "id-5"]

    def test_protected_excluded_when_selected_by_id_or_name(self, inventory):
        policy = ProtectionPolicy()

        by_id = policy.select_targets(inventory, BulkActionRequest(ids=["id-4"]))
        by_name = policy.select_targets(inventory, BulkActionRequest(names=["KZ-Dashboard-API"]))

        assert by_id == []
        assert by_name == []

    def test_names_are_case_insensitive_ids_are_exact(self, inventory):
        policy = ProtectionPolicy()

        targets = policy.select_targets(inventory, BulkActionRequest(ids=["ID-1"], names=["web-2"]))

        assert [c.id for c in targets] == ["id-2"]

    def test_union_preserves_inventory_order_without_duplicates(self, inventory):
        policy = ProtectionPolicy()
        request = BulkActionRequest(ids=["id-5", "id-1"], names=["web-1", "db"])

        targets = policy.select_targets(inventory, request)

        assert [c.id for c in targets] == ["id-1", "id-3", "id-5"]

    def test_empty_selection_yields_no_targets(self, inventory):
        policy = ProtectionPolicy()

        assert policy.select_targets(inventory, BulkActionRequest()) == []
        assert policy.select_targets(inventory, BulkActionRequest(ids=[], names=[])) == []
        assert policy.select_targets([], BulkActionRequest(include_all=True)) == []

    def test_camel_case_alias_accepted(self, inventory):
        request = BulkActionRequest.model_validate({"includeAll": True})

        assert request.include_all is True

    def test_random_requests_never_target_protected_and_are_idempotent(self, summary_factory):
        rng = random.Random(42)
        names = ["web-1", "web-2", "api", "kz-dashboard-api", "KZ-DASHBOARD-WEB", "cache", "queue"]
        policy = ProtectionPolicy()

        for _ in range(200):
            inventory = [summary_factory(f"id-{i}", name) for i, name in enumerate(rng.sample(names, rng.randint(0, 7)))]
            request = BulkActionRequest(
                ids=[c.id for c in inventory if rng.random() < 0.3],
                names=[c.name.upper() for c in inventory if rng.random() < 0.3],
                include_all=rng.random() < 0.2,
            )

            first = policy.select_targets(inventory, request)
            second = policy.select_targets(inventory, request)

            assert first == second
            assert all(not policy.is_protected(c.name) for c in first)
            assert len({c.id for c in first}) == len(first)
            positions = [inventory.index(c) for c in first]
            assert positions == sorted(positions)


class TestSelectCluster:
    def test_matches_cluster_case_insensitively(self, inventory):
        policy = ProtectionPolicy()

        targets = policy.select_cluster(inventory, " WEB ")

        assert [c.id for c in targets] == ["id-1", "id-2"]

    def test_protected_containers_skipped_in_cluster(self, inventory):
        assert ProtectionPolicy().select_cluster(inventory, "kz") == []

    def test_unknown_or_blank_cluster_selects_nothing(self, inventory):
        policy = ProtectionPolicy()

        assert policy.select_cluster(inventory, "nope") == []
        assert policy.select_cluster(inventory, "  ") == []
