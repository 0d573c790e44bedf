"""User model - attribution of sales and payments to a login."""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from werkzeug.security import generate_password_hash, check_password_hash
from pos.database import Base


class UserRole(str, enum.Enum):
    """User roles."""
    ADMIN = 'ADMIN'
    CASHIER = 'CASHIER'


class User(Base):
    """User model; username is stored lower-cased."""
    
    __tablename__ = 'users'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=UserRole.CASHIER.value, server_default='CASHIER')
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    
    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')
    
    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)
    
    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value
    
    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
