"""
Integration tests for the product catalog.
"""

import pytest
from decimal import Decimal

from pos.exceptions import ValidationError, NotFoundError, StorageError
from pos.models import Product
from pos.services import catalog_service


class TestCatalogLookup:

    def test_find_by_code_exact(self, session, product):
        assert catalog_service.find_by_code(session, 'P001').id == product.id
        assert catalog_service.find_by_code(session, 'p001') is None
        assert catalog_service.find_by_code(session, None) is None

    def test_list_ordered_by_code(self, session, make_product):
        make_product('B2')
        make_product('A1')
        assert [p.code for p in catalog_service.list_products(session)] == ['A1', 'B2']

    def test_low_stock(self, session, make_product):
        make_product('LOW', stock='2', reorder_level='5')
        make_product('EDGE', stock='5', reorder_level='5')
        make_product('OK', stock='9', reorder_level='5')
        make_product('NOLEVEL', stock='0', reorder_level='0')

        assert [p.code for p in catalog_service.low_stock(session)] == ['EDGE', 'LOW']
        assert session.query(Product).filter_by(code='LOW').one().is_low_stock


class TestUpsertProduct:

    def test_insert_without_id(self, session):
        product = catalog_service.upsert_product(session, {
            'code': ' X1 ', 'description': 'Widget', 'sell_price': '2.50', 'stock': 4
        })

        assert product.id is not None
        assert product.code == 'X1'
        assert product.uom == 'pcs'
        assert product.sell_price == Decimal('2.5')

    def test_update_by_id(self, session, product):
        catalog_service.upsert_product(session, {
            'id': product.id, 'code': 'P001', 'description': 'Renamed', 'sell_price': 12, 'stock': 7
        })

        session.expire_all()
        updated = session.get(Product, product.id)
        assert updated.description == 'Renamed'
        assert updated.sell_price == Decimal('12')
        assert updated.stock == Decimal('7')

    def test_update_unknown_id(self, session):
        with pytest.raises(NotFoundError):
            catalog_service.upsert_product(session, {'id': 404, 'code': 'Z'})

    def test_blank_code_rejected(self, session):
        with pytest.raises(ValidationError):
            catalog_service.upsert_product(session, {'code': '  '})

    def test_non_numeric_price_rejected(self, session):
        with pytest.raises(ValidationError):
            catalog_service.upsert_product(session, {'code': 'Z', 'sell_price': 'cheap'})

    def test_duplicate_code_without_id_is_storage_error(self, session, product):
        with pytest.raises(StorageError):
            catalog_service.upsert_product(session, {'code': 'P001'})
        assert session.query(Product).count() == 1

    def test_upsert_by_code_updates_existing(self, session, product):
        saved = catalog_service.upsert_by_code(session, {'code': 'P001', 'sell_price': 11, 'stock': 5})

        assert saved.id == product.id
        assert session.query(Product).count() == 1
        assert catalog_service.product_to_dict(saved)['sell_price'] == 11.0
