from sqlalchemy import Column, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Address(BaseModel, Base):
    """Shipping address; at most one per user has is_default set."""
    __tablename__ = "addresses"

    UPDATABLE_COLUMNS = frozenset({"street", "city", "state", "postal_code", "country", "is_default"})

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    street = Column(String(255), nullable=False)
    city = Column(String(128), nullable=False)
    state = Column(String(128), nullable=True)
    postal_code = Column(String(32), nullable=False)
    country = Column(String(128), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="addresses")
