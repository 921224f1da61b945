from sqlalchemy.orm import relationship
from sqlalchemy import Column, String, Text, Date, Index

from models.base_model import BaseModel, Base


class Author(BaseModel, Base):
    __tablename__ = "authors"

    UPDATABLE_COLUMNS = frozenset({"first_name", "last_name", "bio", "birth_date", "nationality"})

    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)  # names are not unique
    bio = Column(Text, nullable=True)
    birth_date = Column(Date, nullable=True)
    nationality = Column(String(64), nullable=True)

    book_authors = relationship("BookAuthor", back_populates="author", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("ix_authors_last_first", "last_name", "first_name"),
    )
