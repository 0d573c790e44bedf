"""
Sales service with transactional logic.
Turns a cart into a sale header, its lines, stock deductions and one payment.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Integer, Numeric, bindparam, update
from sqlalchemy.exc import SQLAlchemyError

from pos.exceptions import (
    PosError, ValidationError, InvalidSale, InvalidLine,
    ProductNotFound, CustomerNotFound, InvalidState, StorageError
)
from pos.models import Product, Customer, Sale, SaleLine, Payment, SYSTEM_ACTOR, normalize_payment_method
from pos.services.catalog_service import find_by_code
from pos.utils.formatters import to_decimal, to_storage

logger = logging.getLogger(__name__)

_products = Product.__table__

# Executed once per line; repeated products decrement once per line
STOCK_DECREMENT = (
    update(_products)
    .where(_products.c.id == bindparam('product_id', type_=Integer))
    .values(stock=_products.c.stock - bindparam('qty', type_=Numeric(14, 4)))
)


@dataclass(frozen=True)
class SaleLineInput:
    """Pre-resolved cart line: product id, quantity and the unit price to charge."""
    product_id: int
    quantity: Decimal
    price: Decimal

    @property
    def extension(self) -> Decimal:
        return self.quantity * self.price

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleLineInput':
        product_id = data.get('product_id', data.get('item_id'))
        try:
            return cls(
                product_id=int(product_id),
                quantity=to_decimal(data.get('quantity')),
                price=to_decimal(data.get('price')),
            )
        except (TypeError, ValueError):
            raise InvalidLine(product_id, data.get('quantity'), 'malformed line')


@dataclass(frozen=True)
class CodeLineInput:
    """Cart line identified by product code; price comes from the catalog."""
    code: str
    quantity: Any

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodeLineInput':
        return cls(code=data.get('code') or '', quantity=data.get('quantity'))


def _to_quantity(code: str, value: Any) -> Decimal:
    try:
        return to_decimal(value)
    except ValueError:
        raise InvalidLine(code, value)


def resolve_lines_by_code(session, lines: Sequence[CodeLineInput]) -> List[SaleLineInput]:
    """
    Resolve code-based lines against the catalog, snapshotting the current sell price.
    
    Raises:
        InvalidSale: no lines
        InvalidLine: blank code or quantity <= 0
        ProductNotFound: unknown code
        InvalidState: resolved product without an id
    """
    if not lines:
        raise InvalidSale()
    
    resolved = []
    for line in lines:
        code = (line.code or '').strip()
        qty = _to_quantity(code, line.quantity)
        if not code or qty <= 0:
            raise InvalidLine(code, line.quantity)
        
        product = find_by_code(session, code)
        if product is None:
            raise ProductNotFound(code)
        if product.id is None:
            raise InvalidState(f'Product has no id: {code}')
        
        resolved.append(SaleLineInput(
            product_id=product.id,
            quantity=qty,
            price=to_decimal(product.sell_price),
        ))
    return resolved


def _scaled_line(line: SaleLineInput) -> SaleLineInput:
    """Line with quantity and price rounded to the stored scale; rejects NaN and infinities."""
    try:
        quantity = to_storage(to_decimal(line.quantity))
        price = to_storage(to_decimal(line.price))
    except ValueError:
        raise InvalidLine(line.product_id, line.quantity, 'not a finite number')
    return SaleLineInput(product_id=line.product_id, quantity=quantity, price=price)


def _validate_lines(session, lines: Sequence[SaleLineInput]) -> List[SaleLineInput]:
    """
    Validate pre-resolved lines before anything is written.
    
    Returns the lines rounded to the stored scale, so the persisted total equals
    the sum of the persisted line extensions.
    """
    scaled = []
    for line in lines:
        if line.quantity is None or line.price is None:
            raise InvalidLine(line.product_id, line.quantity, 'quantity and price are required')
        line = _scaled_line(line)
        if line.quantity <= 0:
            raise InvalidLine(line.product_id, line.quantity, 'quantity must be greater than 0')
        if line.price < 0:
            raise InvalidLine(line.product_id, line.quantity, 'price cannot be negative')
        scaled.append(line)
    
    product_ids = {line.product_id for line in scaled}
    found = {
        row[0] for row in
        session.query(Product.id).filter(Product.id.in_(product_ids)).all()
    }
    for line in scaled:
        if line.product_id not in found:
            raise ProductNotFound(str(line.product_id))
    return scaled


def calculate_total(lines: Sequence[SaleLineInput]) -> Decimal:
    """Sum of quantity x price over the lines."""
    return sum((line.extension for line in lines), Decimal('0'))


def create_sale(
    session,
    customer_phone: Optional[str],
    lines: Sequence[SaleLineInput],
    paid_amount,
    payment_method: Optional[str] = 'CASH',
    created_by: Optional[str] = None,
    now: Optional[datetime] = None
) -> int:
    """
    Persist a sale in a single transaction.
    
    Steps:
    1. Validate lines, customer and amounts (no writes)
    2. total = sum(quantity x price)
    3. Insert sale header
    4. Insert one sale line per cart line
    5. Decrement product stock once per line (no availability check)
    6. Insert exactly one payment for the paid amount
    7. Commit; any failure rolls everything back
    
    Args:
        session: SQLAlchemy session
        customer_phone: existing customer phone, or None for a walk-in sale
        lines: pre-resolved SaleLineInput values
        paid_amount: amount paid now; may be below or above the total
        payment_method: open string, blank defaults to CASH
        created_by: acting username, blank defaults to SYSTEM
        now: creation timestamp (defaults to the current local time)
    
    Returns:
        sale_id: ID of the created sale
    """
    lines = list(lines or [])
    if not lines:
        raise InvalidSale()
    
    try:
        paid = to_storage(to_decimal(paid_amount))
    except ValueError:
        raise ValidationError(f'Invalid paid amount: {paid_amount!r}')
    
    method = normalize_payment_method(payment_method)
    actor = (created_by or '').strip() or SYSTEM_ACTOR
    phone = (customer_phone or '').strip() or None
    created_at = now or datetime.now()
    
    try:
        lines = _validate_lines(session, lines)
        if phone is not None and session.get(Customer, phone) is None:
            raise CustomerNotFound(phone)
    except PosError as e:
        logger.warning(f"Sale rejected for {actor}: {e.message}")
        raise
    
    total = calculate_total(lines)
    
    try:
        sale = Sale(
            customer_phone=phone,
            total=total,
            paid=paid,
            created_at=created_at,
            created_by=actor,
        )
        session.add(sale)
        session.flush()
        sale_id = sale.id
        
        session.add_all([
            SaleLine(
                sale_id=sale_id,
                item_id=line.product_id,
                quantity=line.quantity,
                price=line.price,
            )
            for line in lines
        ])
        session.flush()
        
        session.execute(
            STOCK_DECREMENT,
            [{'product_id': line.product_id, 'qty': line.quantity} for line in lines]
        )
        
        session.add(Payment(
            sale_id=sale_id,
            method=method,
            amount=paid,
            reference=None,
            created_at=created_at,
            created_by=actor,
        ))
        session.commit()
        
    except PosError:
        session.rollback()
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Sale rolled back after storage failure")
        raise StorageError(f'Error creating sale: {e}') from e
    
    logger.info(f"Sale #{sale_id} created by {actor}: total={total} paid={paid} method={method}")
    return sale_id


def create_sale_by_code(
    session,
    customer_phone: Optional[str],
    lines: Sequence[CodeLineInput],
    paid_amount,
    payment_method: Optional[str] = 'CASH',
    created_by: Optional[str] = None,
    now: Optional[datetime] = None
) -> int:
    """Resolve code-based lines against the catalog, then run create_sale."""
    resolved = resolve_lines_by_code(session, lines)
    return create_sale(
        session, customer_phone, resolved, paid_amount,
        payment_method=payment_method, created_by=created_by, now=now
    )
