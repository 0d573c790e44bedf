import pytest
from decimal import Decimal

from sqlalchemy import text

from config import TestConfig
from pos import create_app
from pos.database import get_session
from pos.models import Product, Customer
from pos.services.user_service import save_user


SNAPSHOT_TABLES = ('products', 'sales', 'sale_lines', 'payments')


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application instance backed by a fresh SQLite file."""
    class _TestConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'pos.db'}"
        INVOICE_PDF_DIR = str(tmp_path / 'invoices')

    app = create_app(_TestConfig)
    with app.app_context():
        yield app
        get_session().remove()
    app.extensions['pos_engine'].dispose()


@pytest.fixture(scope='function')
def session(app):
    """Database session shared with request handlers in the same context."""
    db_session = get_session()
    yield db_session
    db_session.rollback()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def authenticated_client(client):
    """Client logged in as the bootstrap admin."""
    response = client.post('/auth/login', json={'username': 'admin', 'password': 'admin123'})
    assert response.status_code == 200
    return client


@pytest.fixture(scope='function')
def cashier(session):
    return save_user(session, 'Cashier1', 'Cashier One', 'CASHIER', 'secret1')


@pytest.fixture(scope='function')
def cashier_client(app, cashier):
    """Separate client logged in as a cashier."""
    client = app.test_client()
    response = client.post('/auth/login', json={'username': 'cashier1', 'password': 'secret1'})
    assert response.status_code == 200
    return client


@pytest.fixture(scope='function')
def make_product(session):
    """Factory for catalog products."""
    def _make(code='P001', sell_price='10', stock='5', description=None, reorder_level='0', buy_price='0'):
        product = Product(
            code=code,
            description=description or f'Product {code}',
            uom='pcs',
            buy_price=Decimal(buy_price),
            sell_price=Decimal(sell_price),
            default_number=Decimal('1'),
            stock=Decimal(stock),
            reorder_level=Decimal(reorder_level),
        )
        session.add(product)
        session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def product(make_product):
    """P001: sell price 10, stock 5."""
    return make_product()


@pytest.fixture(scope='function')
def customer(session):
    customer = Customer(phone='0700111222', name='Alice Buyer', status='Active', credit_limit=Decimal('100'))
    session.add(customer)
    session.commit()
    return customer


@pytest.fixture(scope='function')
def table_snapshot(session):
    """Return a callable capturing every row of the sale-related tables."""
    def _snapshot():
        return {
            table: session.execute(text(f"SELECT * FROM {table} ORDER BY 1")).all()
            for table in SNAPSHOT_TABLES
        }
    return _snapshot
