"""
Integration tests for the JSON transport and CLI commands.
"""

import pytest
from datetime import date
from decimal import Decimal

from pos.models import Product, Sale


class TestAuthApi:

    def test_login_required(self, client):
        response = client.get('/products')
        assert response.status_code == 401
        assert response.get_json()['status'] == 'error'

    def test_login_and_me(self, authenticated_client):
        response = authenticated_client.get('/auth/me')
        assert response.status_code == 200
        assert response.get_json()['user']['username'] == 'admin'

    def test_bad_credentials(self, client):
        response = client.post('/auth/login', json={'username': 'admin', 'password': 'wrong'})
        assert response.status_code == 401

    def test_logout(self, authenticated_client):
        authenticated_client.post('/auth/logout')
        assert authenticated_client.get('/auth/me').status_code == 401

    def test_health(self, client):
        assert client.get('/health').get_json() == {'status': 'healthy'}

    def test_unknown_route_is_json(self, client):
        response = client.get('/nowhere')
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Not Found'


class TestCatalogAndCustomersApi:

    def test_product_upsert_and_get(self, authenticated_client):
        response = authenticated_client.post('/products', json={'code': 'P9', 'sell_price': 3, 'stock': 1})
        assert response.status_code == 200

        response = authenticated_client.get('/products/P9')
        assert response.get_json()['product']['sell_price'] == 3.0

    def test_unknown_product(self, authenticated_client):
        response = authenticated_client.get('/products/NOPE')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOPE'

    def test_non_object_body(self, authenticated_client):
        response = authenticated_client.post('/products', json=['P9'])
        assert response.status_code == 400

    def test_customer_flow(self, authenticated_client):
        response = authenticated_client.post('/customers', json={'phone': '0722', 'name': 'Carol'})
        assert response.get_json()['customer']['status'] == 'Active'

        response = authenticated_client.post('/customers/0722/deactivate')
        assert response.get_json()['customer']['status'] == 'Disactive'

        assert authenticated_client.get('/customers/0999').status_code == 404


class TestSalesApi:

    def test_create_by_code(self, authenticated_client, session, product):
        response = authenticated_client.post('/sales/by-code', json={
            'lines': [{'code': 'P001', 'quantity': 2}], 'paid': 20, 'method': 'cash'
        })

        assert response.status_code == 201
        sale = session.get(Sale, response.get_json()['id'])
        assert sale.created_by == 'admin'
        session.expire_all()
        assert session.get(Product, product.id).stock == Decimal('3')

    def test_create_with_resolved_lines(self, authenticated_client, product):
        response = authenticated_client.post('/sales', json={
            'lines': [{'product_id': product.id, 'quantity': 1, 'price': 9.5}], 'paid': 9.5
        })
        assert response.status_code == 201

    def test_empty_cart(self, authenticated_client):
        response = authenticated_client.post('/sales/by-code', json={'lines': [], 'paid': 0})
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Sale must have at least one line'

    def test_unknown_code(self, authenticated_client, product):
        response = authenticated_client.post('/sales/by-code', json={'lines': [{'code': 'X', 'quantity': 1}]})
        assert response.status_code == 404

    def test_non_finite_quantity_is_bad_request(self, authenticated_client, session, product):
        response = authenticated_client.post(
            '/sales/by-code',
            data='{"lines": [{"code": "P001", "quantity": NaN}], "paid": 10}',
            content_type='application/json',
        )

        assert response.status_code == 400
        assert session.query(Sale).count() == 0

    def test_cashier_sees_only_own_sales(self, authenticated_client, cashier_client, product):
        authenticated_client.post('/sales/by-code', json={'lines': [{'code': 'P001', 'quantity': 1}], 'paid': 10})
        cashier_client.post('/sales/by-code', json={'lines': [{'code': 'P001', 'quantity': 2}], 'paid': 20})

        own = cashier_client.get('/sales/today').get_json()['sales']
        assert [s['created_by'] for s in own] == ['cashier1']

        everything = authenticated_client.get('/sales?filter=All').get_json()['sales']
        assert len(everything) == 2

    def test_invalid_filter(self, authenticated_client):
        assert authenticated_client.get('/sales?filter=Yesterday').status_code == 400

    def test_range_requires_admin(self, cashier_client):
        today = date.today().isoformat()
        response = cashier_client.get(f'/sales/range?start={today}&end={today}')
        assert response.status_code == 403

    def test_range(self, authenticated_client, product):
        authenticated_client.post('/sales/by-code', json={'lines': [{'code': 'P001', 'quantity': 1}], 'paid': 10})
        today = date.today().isoformat()

        response = authenticated_client.get(f'/sales/range?start={today}&end={today}')
        assert len(response.get_json()['sales']) == 1

        assert authenticated_client.get('/sales/range?start=bad&end=bad').status_code == 400


class TestReportsAndInvoicesApi:

    def test_stats_scoped_for_cashier(self, authenticated_client, cashier_client, product):
        authenticated_client.post('/sales/by-code', json={'lines': [{'code': 'P001', 'quantity': 1}], 'paid': 10})
        cashier_client.post('/sales/by-code', json={
            'lines': [{'code': 'P001', 'quantity': 2}], 'paid': 5, 'method': 'CREDIT'
        })

        cashier_stats = cashier_client.get('/reports/stats').get_json()['stats']
        assert cashier_stats['invoice_count'] == 1
        assert cashier_stats['credit_sales'] == '5.00'
        assert cashier_stats['total_balance'] == '15.00'

        admin_stats = authenticated_client.get('/reports/stats?filter=All').get_json()['stats']
        assert admin_stats['invoice_count'] == 2

        assert authenticated_client.get('/reports/cash').get_json()['cash'] == '10.00'

    def test_admin_only_reports(self, cashier_client, authenticated_client):
        assert cashier_client.get('/reports/monthly').status_code == 403
        assert authenticated_client.get('/reports/monthly').get_json()['monthly']['total'] == '0.00'
        assert authenticated_client.get('/reports/payment-methods').get_json()['methods'] == []
        assert authenticated_client.get('/reports/users').get_json()['users'] == []

    def test_invoice_json_and_pdf(self, authenticated_client, product):
        sale_id = authenticated_client.post('/sales/by-code', json={
            'lines': [{'code': 'P001', 'quantity': 1}], 'paid': 10
        }).get_json()['id']

        invoice = authenticated_client.get(f'/invoices/{sale_id}').get_json()['invoice']
        assert invoice['customer_name'] == 'Walk-in Customer'
        assert invoice['total'] == '10.00'

        response = authenticated_client.get(f'/invoices/{sale_id}/pdf')
        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')

    def test_missing_invoice(self, authenticated_client):
        response = authenticated_client.get('/invoices/999')
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Invoice not found: 999'


class TestCliCommands:

    def test_create_user(self, app, session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-user', '--username', 'Dana', '--display-name', 'Dana D',
            '--role', 'cashier', '--password', 'pw'
        ])

        assert result.exit_code == 0, result.output
        assert 'dana' in result.output

    def test_export_invoice(self, app, session, product):
        from pos.services.sales_service import CodeLineInput, create_sale_by_code
        sale_id = create_sale_by_code(session, None, [CodeLineInput('P001', 1)], 10)

        result = app.test_cli_runner().invoke(args=['export-invoice', str(sale_id)])

        assert result.exit_code == 0, result.output
        assert result.output.strip().endswith(f'invoice-{sale_id}.pdf')

    def test_export_unknown_invoice(self, app):
        result = app.test_cli_runner().invoke(args=['export-invoice', '999'])
        assert result.exit_code != 0
        assert 'Invoice not found: 999' in result.output
