"""Tests for task link repair."""

from tests.helpers import add_category, add_subcategory, add_task


class TestLinkRepairEngine:
    """Tests for LinkRepairEngine."""

    def test_deleted_subcategory_is_cleared(self, small_services, owner):
        """Test that a task keeps its category when only the subcategory is gone."""
        casa = add_category(small_services, owner, "Casa")
        limpeza = add_subcategory(small_services, casa, "Limpeza")
        task_id = add_task(small_services, owner, "Lavar louça", casa, limpeza)
        small_services.store.delete("subcategories", limpeza)

        report = small_services.reconciliation.repair_links(owner)

        task = small_services.tasks.find(task_id)
        assert task.category_id == casa
        assert task.subcategory_id is None
        assert report.subcategories_cleared == 1
        assert report.tasks_updated == 1

    def test_deleted_category_falls_back_to_pessoal(self, small_services, owner):
        add_category(small_services, owner, "Financeiro", order=0)
        pessoal = add_category(small_services, owner, "Pessoal", order=1)
        biking = add_category(small_services, owner, "Biking", order=2)
        task_id = add_task(small_services, owner, "Trilha", biking)
        small_services.store.delete("categories", biking)

        report = small_services.reconciliation.repair_links(owner)

        assert small_services.tasks.find(task_id).category_id == pessoal
        assert report.categories_relinked == 1

    def test_fallback_is_first_by_order_without_pessoal(self, small_services, owner):
        add_category(small_services, owner, "Viagens", order=4)
        first = add_category(small_services, owner, "Casa", order=1)
        task_id = add_task(small_services, owner, "Orphan", "ghost")

        small_services.reconciliation.repair_links(owner)

        assert small_services.tasks.find(task_id).category_id == first

    def test_dangling_category_adopts_subcategory_parent(self, small_services, owner):
        add_category(small_services, owner, "Pessoal", order=0)
        casa = add_category(small_services, owner, "Casa", order=1)
        limpeza = add_subcategory(small_services, casa, "Limpeza")
        task_id = add_task(small_services, owner, "Varrer", "ghost", limpeza)

        small_services.reconciliation.repair_links(owner)

        task = small_services.tasks.find(task_id)
        assert task.category_id == casa
        assert task.subcategory_id == limpeza

    def test_subcategory_of_another_category_is_cleared(self, small_services, owner):
        casa = add_category(small_services, owner, "Casa")
        rotina = add_category(small_services, owner, "Rotina")
        limpeza = add_subcategory(small_services, rotina, "Limpeza")
        task_id = add_task(small_services, owner, "Varrer", casa, limpeza)

        report = small_services.reconciliation.repair_links(owner)

        task = small_services.tasks.find(task_id)
        assert task.category_id == casa
        assert task.subcategory_id is None
        assert report.subcategories_cleared == 1

    def test_remap_tables_are_applied(self, small_services, owner):
        keep = add_category(small_services, owner, "Biking")
        keep_sub = add_subcategory(small_services, keep, "Trilhas")
        task_id = add_task(small_services, owner, "Serra", "old-cat", "old-sub")

        report = small_services.reconciliation.link_repair.repair(
            owner,
            category_remap={"old-cat": keep},
            subcategory_remap={"old-sub": keep_sub},
        )

        task = small_services.tasks.find(task_id)
        assert task.category_id == keep
        assert task.subcategory_id == keep_sub
        assert report.categories_remapped == 1
        assert report.subcategories_remapped == 1

    def test_valid_tasks_are_not_written(self, small_services, owner, monkeypatch):
        casa = add_category(small_services, owner, "Casa")
        limpeza = add_subcategory(small_services, casa, "Limpeza")
        add_task(small_services, owner, "Varrer", casa, limpeza)
        add_task(small_services, owner, "Organizar", casa)

        writes = []
        original = small_services.store.update

        def spy(collection, doc_id, fields):
            writes.append(doc_id)
            return original(collection, doc_id, fields)

        monkeypatch.setattr(small_services.store, "update", spy)
        report = small_services.reconciliation.repair_links(owner)

        assert writes == []
        assert report.tasks_scanned == 2
        assert report.tasks_updated == 0

    def test_tasks_are_never_deleted(self, small_services, owner):
        add_category(small_services, owner, "Pessoal")
        for i in range(3):
            add_task(small_services, owner, f"Tarefa {i}", f"ghost-{i}", f"ghost-sub-{i}")

        small_services.reconciliation.repair_links(owner)

        assert len(small_services.tasks.find_all(owner)) == 3

    def test_no_categories_leaves_task_unresolved(self, small_services, owner):
        task_id = add_task(small_services, owner, "Orphan", "ghost")

        report = small_services.reconciliation.repair_links(owner)

        assert small_services.tasks.find(task_id).category_id == "ghost"
        assert report.unresolved == 1
        assert report.tasks_updated == 0

    def test_other_users_untouched(self, small_services):
        add_category(small_services, "alice", "Pessoal")
        add_category(small_services, "bob", "Pessoal")
        bob_task = add_task(small_services, "bob", "Orphan", "ghost")

        small_services.reconciliation.repair_links("alice")

        assert small_services.tasks.find(bob_task).category_id == "ghost"
