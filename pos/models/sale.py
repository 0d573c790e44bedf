"""Sale model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.ext.hybrid import hybrid_property
from pos.database import Base

SYSTEM_ACTOR = 'SYSTEM'


class Sale(Base):
    """Sale header. Total is frozen at creation; balance is derived."""
    
    __tablename__ = 'sales'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_phone = Column(String, ForeignKey('customers.phone'), nullable=True)
    # Sum of quantity x price at four fraction digits each, so eight digits are kept
    total = Column(Numeric(18, 8), nullable=False, default=0, server_default='0')
    paid = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    created_by = Column(String, nullable=False, default=SYSTEM_ACTOR, server_default=SYSTEM_ACTOR)
    
    # Relationships
    customer = relationship('Customer', back_populates='sales')
    lines = relationship(
        'SaleLine', back_populates='sale', order_by='SaleLine.id',
        cascade='all, delete-orphan', passive_deletes=True
    )
    payments = relationship(
        'Payment', back_populates='sale', order_by='Payment.id',
        cascade='all, delete-orphan', passive_deletes=True
    )
    
    @hybrid_property
    def balance(self):
        """Amount still owed: total - paid (negative means change was due)."""
        return self.total - self.paid

    def __repr__(self):
        return f"<Sale(id={self.id}, total={self.total}, paid={self.paid}, created_by='{self.created_by}')>"
