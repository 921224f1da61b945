from sqlalchemy.orm import relationship
from sqlalchemy import Column, String, Index

from models.base_model import BaseModel, Base


class Publisher(BaseModel, Base):
    __tablename__ = "publishers"

    UPDATABLE_COLUMNS = frozenset({"name", "address", "city", "country", "phone", "email", "website"})

    name = Column(String(128), nullable=False)
    address = Column(String(255), nullable=True)
    city = Column(String(128), nullable=True)
    country = Column(String(128), nullable=True)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)

    # Books keep existing with publisher_id set to NULL when a publisher is removed
    books = relationship("Book", back_populates="publisher")

    __table_args__ = (
        Index("ix_publishers_name", "name"),
    )
