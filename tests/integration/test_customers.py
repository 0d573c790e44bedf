"""
Integration tests for the customer ledger.
"""

import pytest
from decimal import Decimal

from pos.exceptions import ValidationError, CustomerNotFound
from pos.models import Customer
from pos.services import customer_service

CUSTOMER = {
    'phone': '0711000111',
    'name': 'Bob Regular',
    'address': '12 Market St',
    'dob': '10-02-1975',
    'email': 'bob@example.com',
    'credit_limit': '250',
}


class TestUpsertCustomer:

    def test_insert(self, session):
        customer = customer_service.upsert_customer(session, CUSTOMER)

        assert customer.phone == '0711000111'
        assert customer.dob == '1975-02-10'
        assert customer.status == 'Active'
        assert customer.credit_limit == Decimal('250')

    def test_upsert_twice_is_idempotent(self, session):
        customer_service.upsert_customer(session, CUSTOMER)
        customer_service.upsert_customer(session, CUSTOMER)

        rows = session.query(Customer).filter_by(phone='0711000111').all()
        assert len(rows) == 1
        assert customer_service.customer_to_dict(rows[0]) == {
            'phone': '0711000111',
            'name': 'Bob Regular',
            'address': '12 Market St',
            'dob': '1975-02-10',
            'email': 'bob@example.com',
            'status': 'Active',
            'credit_limit': 250.0,
        }

    def test_update_changes_fields(self, session):
        customer_service.upsert_customer(session, CUSTOMER)
        updated = customer_service.upsert_customer(session, dict(CUSTOMER, name='Robert', email=''))

        assert updated.name == 'Robert'
        assert updated.email is None

    @pytest.mark.parametrize('override', [
        {'phone': ''},
        {'name': '  '},
        {'dob': '1975/02/10'},
        {'status': 'Deleted'},
        {'credit_limit': 'plenty'},
    ])
    def test_invalid_data_rejected(self, session, override):
        with pytest.raises(ValidationError):
            customer_service.upsert_customer(session, dict(CUSTOMER, **override))
        assert session.query(Customer).count() == 0


class TestCustomerLookup:

    def test_list_ordered_by_name(self, session, customer):
        customer_service.upsert_customer(session, dict(CUSTOMER, name='Aaron'))
        assert [c.name for c in customer_service.list_customers(session)] == ['Aaron', 'Alice Buyer']

    def test_find_by_phone(self, session, customer):
        assert customer_service.find_by_phone(session, ' 0700111222 ').name == 'Alice Buyer'
        assert customer_service.find_by_phone(session, '') is None

    def test_deactivate(self, session, customer):
        customer_service.deactivate_customer(session, customer.phone)

        session.expire_all()
        assert session.get(Customer, customer.phone).status == 'Disactive'

    def test_deactivate_unknown(self, session):
        with pytest.raises(CustomerNotFound):
            customer_service.deactivate_customer(session, '999')
