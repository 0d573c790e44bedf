"""Customer model."""
import enum
from sqlalchemy import Column, String, Text, Numeric
from sqlalchemy.orm import relationship
from pos.database import Base


class CustomerStatus(str, enum.Enum):
    """Customer status; customers are soft-disabled, never deleted."""
    ACTIVE = 'Active'
    DISACTIVE = 'Disactive'


class Customer(Base):
    """Customer keyed by phone number."""
    
    __tablename__ = 'customers'
    
    phone = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    address = Column(Text, nullable=True)
    dob = Column(String, nullable=True)  # YYYY-MM-DD
    email = Column(String, nullable=True)
    status = Column(String, nullable=False, default=CustomerStatus.ACTIVE.value, server_default='Active')
    credit_limit = Column(Numeric(14, 4), nullable=False, default=0, server_default='0')
    
    # Relationships
    sales = relationship('Sale', back_populates='customer')
    
    def __repr__(self):
        return f"<Customer(phone='{self.phone}', name='{self.name}', status='{self.status}')>"
