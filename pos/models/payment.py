"""Payment model."""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from pos.database import Base


class PaymentMethod(str, enum.Enum):
    """Known payment methods. Storage keeps an open string."""
    CASH = 'CASH'
    CREDIT = 'CREDIT'
    MOBILE_BANKING = 'MOBILE_BANKING'
    CARD = 'CARD'


def normalize_payment_method(value) -> str:
    """
    Normalize payment method value to string for DB storage.
    
    None or blank defaults to CASH. Unknown methods are kept (upper-cased)
    since the column is an open string.
    """
    if value is None:
        return PaymentMethod.CASH.value
    
    if isinstance(value, PaymentMethod):
        return value.value
    
    normalized = str(value).strip().upper()
    return normalized or PaymentMethod.CASH.value


class Payment(Base):
    """Payment recorded against a sale. A sale may accumulate several."""
    
    __tablename__ = 'payments'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey('sales.id', ondelete='CASCADE'), nullable=False, index=True)
    method = Column(String, nullable=False)
    amount = Column(Numeric(14, 4), nullable=False)
    reference = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    created_by = Column(String, nullable=False, default='SYSTEM', server_default='SYSTEM')
    
    # Relationships
    sale = relationship('Sale', back_populates='payments')
    
    def __repr__(self):
        return f"<Payment(id={self.id}, sale_id={self.sale_id}, method={self.method}, amount={self.amount})>"
