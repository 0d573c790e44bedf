"""Catalog service: product lookup and upsert."""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from pos.exceptions import ValidationError, NotFoundError, PosError, StorageError
from pos.models import Product
from pos.utils.formatters import to_decimal, to_storage

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = (
    'code', 'description', 'uom', 'buy_price', 'sell_price',
    'default_number', 'stock', 'reorder_level',
)
NUMERIC_FIELDS = ('buy_price', 'sell_price', 'default_number', 'stock', 'reorder_level')


def list_products(session) -> List[Product]:
    """All products ordered by code."""
    return session.query(Product).order_by(Product.code).all()


def find_by_code(session, code: str) -> Optional[Product]:
    """Exact, case-sensitive lookup by code."""
    if code is None:
        return None
    return session.query(Product).filter(Product.code == code).first()


def get_by_id(session, product_id: int) -> Optional[Product]:
    return session.get(Product, product_id)


def low_stock(session) -> List[Product]:
    """Products at or under a positive reorder level. Advisory only."""
    return session.query(Product).filter(
        Product.reorder_level > 0,
        Product.stock <= Product.reorder_level
    ).order_by(Product.code).all()


def _clean_product_data(data: dict) -> dict:
    """Validate and normalize product fields."""
    code = (data.get('code') or '').strip()
    if not code:
        raise ValidationError('Product code is required')
    
    cleaned = {
        'code': code,
        'description': (data.get('description') or '').strip() or None,
        'uom': (data.get('uom') or '').strip() or 'pcs',
    }
    for field in NUMERIC_FIELDS:
        try:
            cleaned[field] = to_storage(to_decimal(data.get(field)))
        except ValueError:
            raise ValidationError(f'Invalid value for {field}: {data.get(field)!r}')
    return cleaned


def upsert_product(session, data: dict) -> Product:
    """
    Insert when the payload carries no id, otherwise update all mutable fields by id.
    
    Callers wanting update-by-code semantics must resolve the id first
    (see upsert_by_code).
    
    Raises:
        ValidationError: blank code or non-numeric amounts
        NotFoundError: id given but no such product
        StorageError: store failure (e.g. duplicate code)
    """
    product_id = data.get('id')
    cleaned = _clean_product_data(data)
    
    try:
        if product_id is None:
            product = Product(**cleaned)
            session.add(product)
        else:
            product = session.get(Product, int(product_id))
            if product is None:
                raise NotFoundError(f"Product not found: id {product_id}")
            for field in MUTABLE_FIELDS:
                setattr(product, field, cleaned[field])
        session.commit()
    except PosError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception(f"Error saving product {cleaned['code']}")
        raise StorageError(f"Could not save product {cleaned['code']}: {e}") from e
    
    logger.info(f"Product saved: id={product.id} code={product.code}")
    return product


def upsert_by_code(session, data: dict) -> Product:
    """Upsert that updates the existing row when a product with the same code exists."""
    if data.get('id') is None:
        existing = find_by_code(session, (data.get('code') or '').strip())
        if existing is not None:
            data = dict(data, id=existing.id)
    return upsert_product(session, data)


def product_to_dict(product: Product) -> dict:
    """Serialize a product for the JSON transport."""
    return {
        'id': product.id,
        'code': product.code,
        'description': product.description,
        'uom': product.uom,
        'buy_price': float(product.buy_price),
        'sell_price': float(product.sell_price),
        'default_number': float(product.default_number),
        'stock': float(product.stock),
        'reorder_level': float(product.reorder_level),
    }
