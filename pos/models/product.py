"""Product model."""
from sqlalchemy import Column, Integer, String, Text, Numeric
from pos.database import Base


class Product(Base):
    """Product model (catalog entry, natural key = code)."""
    
    __tablename__ = 'products'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    uom = Column(String, nullable=False, default='pcs', server_default='pcs')
    buy_price = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    sell_price = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    default_number = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    # No floor: sales may drive stock below zero
    stock = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    reorder_level = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    
    def __repr__(self):
        return f"<Product(id={self.id}, code='{self.code}', stock={self.stock})>"
    
    @property
    def is_low_stock(self):
        """Advisory flag: stock at or under a positive reorder level."""
        return bool(self.reorder_level) and self.reorder_level > 0 and self.stock <= self.reorder_level
