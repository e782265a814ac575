"""Unit tests for DjangoRepository and DjangoUnitOfWork.

Writes are staged and only hit the database on ``commit``; leaving the
``with`` block without committing (or with an exception) discards them.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.categories.models import Category
from modules.core.exceptions import ConcurrencyConflict, IntegrityConflict
from modules.core.repositories.interfaces import normalize_paging
from modules.core.repositories.unit_of_work import DjangoUnitOfWork
from modules.products.models import Product

pytestmark = pytest.mark.unit


class TestStagedWrites:
    def test_add_is_deferred_until_commit(self):
        with DjangoUnitOfWork() as uow:
            uow.categories.add(Category(name="Audio"))
            assert uow.pending_changes == 1
            assert not Category.objects.filter(name="Audio").exists()
            uow.commit()
            assert uow.pending_changes == 0
        assert Category.objects.filter(name="Audio").exists()

    def test_uncommitted_changes_are_discarded(self):
        with DjangoUnitOfWork() as uow:
            uow.categories.add(Category(name="Video"))
        assert not Category.objects.filter(name="Video").exists()

    def test_exception_rolls_back_committed_work(self):
        with pytest.raises(RuntimeError):
            with DjangoUnitOfWork() as uow:
                uow.categories.add(Category(name="Gaming"))
                uow.commit()
                raise RuntimeError("boom")
        assert not Category.objects.filter(name="Gaming").exists()

    def test_rollback_clears_changes(self):
        with DjangoUnitOfWork() as uow:
            uow.categories.add(Category(name="Cables"))
            uow.rollback()
            uow.commit()
        assert not Category.objects.filter(name="Cables").exists()

    def test_integrity_error_is_translated(self, category):
        with pytest.raises(IntegrityConflict):
            with DjangoUnitOfWork() as uow:
                uow.categories.add(Category(name=category.name))
                uow.commit()

    def test_update_only_touches_listed_fields(self, category):
        with DjangoUnitOfWork() as uow:
            loaded = uow.categories.find_one(id=category.id)
            loaded.description = "Changed"
            uow.categories.update(loaded, fields=["description"])
            uow.commit()
        category.refresh_from_db()
        assert category.description == "Changed"

    def test_delete(self, category):
        with DjangoUnitOfWork() as uow:
            uow.categories.delete(uow.categories.find_one(id=category.id))
            uow.commit()
        assert not Category.objects.filter(id=category.id).exists()


class TestStockAdjustment:
    def test_decrement_and_increment(self, make_product):
        product = make_product(stock=5)
        with DjangoUnitOfWork() as uow:
            uow.products.adjust_stock(product.id, -3)
            uow.products.adjust_stock(product.id, 1)
            uow.commit()
        product.refresh_from_db()
        assert product.stock_quantity == 3

    def test_over_decrement_is_a_concurrency_conflict(self, make_product):
        product = make_product(stock=2)
        with pytest.raises(ConcurrencyConflict):
            with DjangoUnitOfWork() as uow:
                uow.products.adjust_stock(product.id, -3)
                uow.commit()
        product.refresh_from_db()
        assert product.stock_quantity == 2


class TestReads:
    def test_malformed_id_returns_none(self):
        uow = DjangoUnitOfWork()
        assert uow.products.find_one(id="nope") is None
        assert uow.products.find_many(id="nope") == []
        assert uow.products.exists(id="nope") is False
        assert uow.products.count(id="nope") == 0

    def test_includes_eager_load(self, make_product, django_assert_num_queries):
        make_product(name="One")
        make_product(name="Two")
        uow = DjangoUnitOfWork()
        with django_assert_num_queries(1):
            products = uow.products.find_many(includes=("category",))
            assert {p.category.name for p in products} == {"Peripherals"}

    def test_get_page(self, make_product):
        for i in range(5):
            make_product(name=f"Item {i}", price=Decimal("1.00"))
        page = DjangoUnitOfWork().products.get_page(2, 2, order_by=("name",))
        assert [p.name for p in page.items] == ["Item 2", "Item 3"]
        assert page.total_count == 5
        assert page.total_pages == 3

    @pytest.mark.parametrize(
        "raw, expected",
        [((0, 0), (1, 10)), ((-3, 500), (1, 100)), ((4, 25), (4, 25))],
    )
    def test_normalize_paging(self, raw, expected):
        assert normalize_paging(*raw) == expected

    def test_locked_read(self, make_product):
        product = make_product(stock=7)
        with DjangoUnitOfWork() as uow:
            locked = uow.products.find_one(id=product.id, for_update=True)
        assert locked.stock_quantity == 7
        assert isinstance(locked, Product)
