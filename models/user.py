from enum import Enum

from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship


class Role(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


class User(BaseModel, Base):
    __tablename__ = "users"

    UPDATABLE_COLUMNS = frozenset({"email", "first_name", "last_name", "phone", "role", "is_active"})
    PROFILE_COLUMNS = frozenset({"first_name", "last_name", "phone"})

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    phone = Column(String(32), nullable=True)
    role = Column(String(16), nullable=False, default=Role.CUSTOMER.value)
    # Inactive accounts cannot log in and their tokens stop validating
    is_active = Column(Boolean, nullable=False, default=True)

    addresses = relationship("Address", back_populates="user", passive_deletes=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
