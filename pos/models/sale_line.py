"""Sale Line model."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from pos.database import Base


class SaleLine(Base):
    """Sale Line; price is a snapshot taken when the sale was created."""
    
    __tablename__ = 'sale_lines'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey('sales.id', ondelete='CASCADE'), nullable=False, index=True)
    # Not a declared FK: lines outlive catalog deletions
    item_id = Column(Integer, nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    price = Column(Numeric(14, 4), nullable=False)
    
    # Relationships
    sale = relationship('Sale', back_populates='lines')
    
    @property
    def line_total(self):
        return self.quantity * self.price
    
    def __repr__(self):
        return f"<SaleLine(id={self.id}, item_id={self.item_id}, quantity={self.quantity})>"
