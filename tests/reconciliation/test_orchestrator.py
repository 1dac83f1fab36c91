"""Tests for ReconciliationService entry points."""

import threading
from collections import Counter

import pytest

from config import get_migrations_dir
from errors import ProtectedRecord
from services.base import Services
from tests.helpers import add_category, add_subcategory, add_task, run_migrations


def _assert_no_dangling_links(services, owner):
    category_ids = {c.id for c in services.categories.find_all(owner)}
    subcategory_parent = {
        s.id: s.category_id for s in services.subcategories.find_all_for_owner(owner)
    }
    for task in services.tasks.find_all(owner):
        assert task.category_id in category_ids
        if task.subcategory_id:
            assert subcategory_parent[task.subcategory_id] == task.category_id


class TestEnsureSeeded:
    """Tests for the first-access seeding flow."""

    def test_seeds_user_without_categories(self, services, owner, catalog):
        categories = services.reconciliation.ensure_seeded(owner)

        assert len(categories) == len(catalog)
        assert all(c.pinned and c.is_system for c in categories)

    def test_existing_categories_are_only_read(self, services, owner, monkeypatch):
        add_category(services, owner, "Viagens")

        def fail(owner):
            raise AssertionError("seed must not run")

        monkeypatch.setattr(services.reconciliation.seeding, "seed", fail)
        categories = services.reconciliation.ensure_seeded(owner)

        assert [c.name for c in categories] == ["Viagens"]

    def test_find_all_never_seeds(self, services, owner):
        assert services.categories.find_all(owner) == []
        assert services.categories.find_all(owner) == []


class TestForceReset:
    """Tests for force_reset."""

    def test_reset_from_messy_state(self, small_services, owner):
        pessoal_a = add_category(small_services, owner, "Pessoal", order=3)
        pessoal_b = add_category(small_services, owner, "pessoal", order=4)
        casa = add_subcategory(small_services, pessoal_b, "Casa", pinned=False)
        add_task(small_services, owner, "Faxina", pessoal_b, casa)
        add_task(small_services, owner, "Orphan", "ghost-123", "ghost-sub")

        report = small_services.reconciliation.force_reset(owner)

        categories = small_services.categories.find_all(owner)
        assert set(Counter(c.name_key for c in categories).values()) == {1}
        assert sorted(c.name for c in categories) == ["Financeiro", "Pessoal"]
        assert small_services.categories.find(pessoal_a).pinned is True
        assert report.dedup.category_remap == {pessoal_b: pessoal_a}
        assert small_services.subcategories.find(casa).category_id == pessoal_a
        _assert_no_dangling_links(small_services, owner)

    def test_reset_is_repeatable(self, small_services, owner):
        add_category(small_services, owner, "Biking")
        add_category(small_services, owner, "Biking")
        small_services.reconciliation.force_reset(owner)
        names = sorted(c.name for c in small_services.categories.find_all(owner))

        report = small_services.reconciliation.force_reset(owner)

        assert sorted(c.name for c in small_services.categories.find_all(owner)) == names
        assert report.dedup.categories_removed == 0
        assert report.seed.categories_created == 0

    def test_seeded_records_are_protected(self, small_services, owner):
        small_services.reconciliation.force_reset(owner)
        pessoal = small_services.categories.find_by_name(owner, "Pessoal")
        [casa] = [
            s for s in small_services.subcategories.find_by_category(pessoal.id)
            if s.name == "Casa"
        ]

        with pytest.raises(ProtectedRecord):
            small_services.categories.delete(pessoal.id)
        with pytest.raises(ProtectedRecord):
            small_services.subcategories.delete(casa.id)

        assert small_services.categories.find(pessoal.id) is not None
        assert small_services.subcategories.find(casa.id) is not None


class TestRepairLinks:
    def test_repair_after_custom_category_delete(self, small_services, owner):
        small_services.reconciliation.ensure_seeded(owner)
        viagens = small_services.categories.create(owner, "Viagens")
        task = small_services.tasks.create(owner, title="Passagens", category_id=viagens.id)

        small_services.categories.delete(viagens.id)
        small_services.reconciliation.repair_links(owner)

        pessoal = small_services.categories.find_by_name(owner, "Pessoal")
        assert small_services.tasks.find(task.id).category_id == pessoal.id


class TestOwnerLock:
    """Tests for serialization of calls for the same owner."""

    def test_concurrent_resets_do_not_duplicate(self, test_config, small_catalog, owner):
        services = Services(test_config, catalog=small_catalog)
        with services.db_manager.connect() as conn:
            run_migrations(conn, get_migrations_dir())

        errors = []

        def reset():
            try:
                services.reconciliation.force_reset(owner)
            except Exception as e:  # surfaced below
                errors.append(e)

        threads = [threading.Thread(target=reset) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        names = [c.name for c in services.categories.find_all(owner)]
        assert sorted(names) == ["Financeiro", "Pessoal"]
        for category in services.categories.find_all(owner):
            subs = services.subcategories.find_by_category(category.id)
            assert set(Counter(s.name_key for s in subs).values()) == {1}


class TestOrphanHealing:
    def test_reset_heals_orphan_after_only_category_is_gone(self, small_services, owner):
        """A subcategory left behind by its deleted category ends up under a live one."""
        viagens = small_services.categories.create(owner, "Viagens")
        hoteis = small_services.subcategories.create(viagens.id, "Hotéis")
        small_services.store.delete("categories", viagens.id)

        report = small_services.reconciliation.force_reset(owner)

        parent_id = small_services.store.get("subcategories", hoteis.id)["category_id"]
        pessoal = small_services.categories.find_by_name(owner, "Pessoal")
        assert parent_id == pessoal.id
        assert report.dedup.orphans_kept == 1
        assert report.orphan_cleanup.orphans_reparented == 1
        assert small_services.subcategories.find_orphans(owner) == []

    def test_reset_without_orphans_skips_cleanup(self, small_services, owner):
        report = small_services.reconciliation.force_reset(owner)

        assert report.orphan_cleanup is None


class TestOwnerLockRegistry:
    def test_locks_released_after_calls(self, small_services, owner):
        small_services.reconciliation.force_reset(owner)
        small_services.reconciliation.ensure_seeded("someone-else")

        assert small_services.reconciliation._locks == {}

    def test_lock_is_reentrant(self, small_services, owner):
        reconciliation = small_services.reconciliation

        with reconciliation._owner_lock(owner):
            reconciliation.repair_links(owner)
            assert reconciliation._locks[owner][1] == 1

        assert reconciliation._locks == {}
