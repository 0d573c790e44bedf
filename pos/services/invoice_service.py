"""Invoice projection: a read-only, denormalized view of one sale."""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from pos.exceptions import InvoiceNotFound
from pos.models import Sale, SaleLine, Payment, Product, PaymentMethod
from pos.services.customer_service import find_by_phone
from pos.utils.formatters import to_decimal, money, quantity, date_str

logger = logging.getLogger(__name__)

WALK_IN_CUSTOMER = 'Walk-in Customer'


@dataclass
class InvoiceItem:
    code: str
    description: str
    qty: Decimal
    price: Decimal
    total: Decimal
    
    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'description': self.description,
            'qty': quantity(self.qty),
            'price': money(self.price),
            'total': money(self.total),
        }


@dataclass
class InvoiceData:
    invoice_no: int
    customer_name: str
    customer_phone: Optional[str]
    date: str
    items: List[InvoiceItem] = field(default_factory=list)
    subtotal: Decimal = Decimal('0')
    tax: Decimal = Decimal('0')
    total: Decimal = Decimal('0')
    paid_amount: Decimal = Decimal('0')
    payment_method: str = PaymentMethod.CASH.value
    
    @property
    def balance(self) -> Decimal:
        return self.total - self.paid_amount
    
    def to_dict(self) -> dict:
        return {
            'invoice_no': self.invoice_no,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'date': self.date,
            'items': [item.to_dict() for item in self.items],
            'subtotal': money(self.subtotal),
            'tax': money(self.tax),
            'total': money(self.total),
            'paid_amount': money(self.paid_amount),
            'balance': money(self.balance),
            'payment_method': self.payment_method,
        }


def latest_payment_method(session, sale_id: int) -> str:
    """Method of the most recent payment for a sale; CASH when there is none."""
    method = session.query(Payment.method).filter(
        Payment.sale_id == sale_id
    ).order_by(
        Payment.created_at.desc(), Payment.id.desc()
    ).limit(1).scalar()
    return method or PaymentMethod.CASH.value


def _invoice_items(session, sale_id: int) -> List[InvoiceItem]:
    rows = session.query(
        Product.code,
        Product.description,
        SaleLine.quantity,
        SaleLine.price,
    ).select_from(SaleLine).outerjoin(
        Product, Product.id == SaleLine.item_id
    ).filter(
        SaleLine.sale_id == sale_id
    ).order_by(SaleLine.id.asc()).all()
    
    items = []
    for row in rows:
        qty = to_decimal(row.quantity)
        price = to_decimal(row.price)
        items.append(InvoiceItem(
            code=row.code or '',
            description=row.description or '',
            qty=qty,
            price=price,
            total=qty * price,
        ))
    return items


def build_invoice_data(session, sale_id: int) -> InvoiceData:
    """
    Assemble the invoice projection for a sale.
    
    The subtotal is recomputed from the lines while the total is the stored
    sale total; both normally agree. Tax is always zero.
    
    Raises:
        InvoiceNotFound: no sale with this id
    """
    sale = session.get(Sale, sale_id)
    if sale is None:
        logger.warning(f"Invoice lookup for unknown sale {sale_id}")
        raise InvoiceNotFound(sale_id)
    
    customer = find_by_phone(session, sale.customer_phone) if sale.customer_phone else None
    items = _invoice_items(session, sale.id)
    
    return InvoiceData(
        invoice_no=sale.id,
        customer_name=customer.name if customer else WALK_IN_CUSTOMER,
        customer_phone=sale.customer_phone,
        date=date_str(sale.created_at),
        items=items,
        subtotal=sum((item.total for item in items), Decimal('0')),
        tax=Decimal('0'),
        total=to_decimal(sale.total),
        paid_amount=to_decimal(sale.paid),
        payment_method=latest_payment_method(session, sale.id),
    )
