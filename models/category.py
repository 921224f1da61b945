from sqlalchemy.orm import relationship
from sqlalchemy import Column, String, Text, ForeignKey, Index

from models.base_model import BaseModel, Base


class Category(BaseModel, Base):
    __tablename__ = "categories"

    UPDATABLE_COLUMNS = frozenset({"name", "description", "parent_id"})

    name = Column(String(128), nullable=False)
    description = Column(Text, nullable=True)
    # Self-referential hierarchy; depth is not constrained
    parent_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    books = relationship("Book", back_populates="category")

    __table_args__ = (
        Index("ix_categories_name", "name"),
    )
