import pytest

from errors import NotFound
from services.resolution import choose_fallback
from tests.helpers import add_category, add_subcategory


class TestCategoryResolver:
    """Tests for CategoryResolver."""

    def test_match_category_ignores_case(self, services, owner):
        category_id = add_category(services, owner, "Financeiro")

        assert services.resolver.match_category(owner, "FINANCEIRO").id == category_id

    def test_match_category_not_found(self, services, owner):
        add_category(services, owner, "Financeiro")

        with pytest.raises(NotFound):
            services.resolver.match_category(owner, "Finance")

    def test_match_category_blank_name(self, services, owner):
        add_category(services, owner, "Financeiro")

        with pytest.raises(NotFound):
            services.resolver.match_category(owner, "  ")

    def test_match_subcategory_prefers_exact_match(self, services, owner):
        category_id = add_category(services, owner, "Comercial")
        add_subcategory(services, category_id, "Reuniões comerciais", order=0)
        exact_id = add_subcategory(services, category_id, "Reuniões", order=1)

        assert services.resolver.match_subcategory(category_id, "reuniões").id == exact_id

    def test_match_subcategory_substring(self, services, owner):
        category_id = add_category(services, owner, "Comercial")
        sub_id = add_subcategory(services, category_id, "Reuniões comerciais")

        assert services.resolver.match_subcategory(category_id, "reuniões").id == sub_id

    def test_match_subcategory_not_found(self, services, owner):
        category_id = add_category(services, owner, "Comercial")

        with pytest.raises(NotFound):
            services.resolver.match_subcategory(category_id, "Vendas")

    def test_resolve_matched(self, services, owner):
        category_id = add_category(services, owner, "Saúde")
        sub_id = add_subcategory(services, category_id, "Treinos")

        placement = services.resolver.resolve(owner, "saúde", "treinos")

        assert placement.matched is True
        assert placement.category_id == category_id
        assert placement.subcategory_id == sub_id

    def test_resolve_unknown_subcategory_is_none(self, services, owner):
        category_id = add_category(services, owner, "Saúde")

        placement = services.resolver.resolve(owner, "Saúde", "Yoga")

        assert placement.category_id == category_id
        assert placement.subcategory_id is None

    def test_resolve_falls_back_to_named_category(self, services, owner):
        add_category(services, owner, "Financeiro", order=0)
        pessoal_id = add_category(services, owner, "Pessoal", order=2)

        placement = services.resolver.resolve(owner, "Trabalho", "Dev")

        assert placement.matched is False
        assert placement.category_id == pessoal_id
        assert placement.subcategory_id is None

    def test_resolve_falls_back_to_first_category(self, services, owner):
        add_category(services, owner, "Zeta", order=4)
        first_id = add_category(services, owner, "Alfa", order=1)

        placement = services.resolver.resolve(owner, None)

        assert placement.matched is False
        assert placement.category_id == first_id

    def test_resolve_without_categories(self, services, owner):
        placement = services.resolver.resolve(owner, "Pessoal")

        assert placement.matched is False
        assert placement.category_id is None


class TestChooseFallback:
    def test_empty(self):
        assert choose_fallback([], "Pessoal") is None
