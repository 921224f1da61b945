from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Date,
    Numeric,
    Text,
    Boolean,
    CheckConstraint,
    Index,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class Book(BaseModel, Base):
    __tablename__ = "books"

    UPDATABLE_COLUMNS = frozenset({
        "isbn", "title", "description", "price", "stock", "pages", "publication_date",
        "language", "publisher_id", "category_id", "cover_image_url", "is_active",
    })

    isbn = Column(String(13), nullable=False, unique=True, index=True)  # normalized digits-only
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    pages = Column(Integer, nullable=True)
    publication_date = Column(Date, nullable=True)
    language = Column(String(64), nullable=False, default="Spanish")
    cover_image_url = Column(String(512), nullable=True)
    # Hidden from customer listings when False; admins still see it
    is_active = Column(Boolean, nullable=False, default=True)

    publisher_id = Column(String(36), ForeignKey("publishers.id", ondelete="SET NULL"), nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)

    publisher = relationship("Publisher", back_populates="books")
    category = relationship("Category", back_populates="books")
    book_authors = relationship("BookAuthor", back_populates="book", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_books_stock_nonnegative"),
        CheckConstraint("price >= 0", name="ck_books_price_nonnegative"),
        CheckConstraint("(pages IS NULL) OR (pages >= 1)", name="ck_books_pages_positive"),
        Index("ix_books_title", "title"),
    )


class BookAuthor(BaseModel, Base):
    """Book/author link; at most one link per book carries is_primary."""
    __tablename__ = "book_authors"

    book_id = Column(String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("authors.id", ondelete="CASCADE"), nullable=False, index=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    book = relationship("Book", back_populates="book_authors")
    author = relationship("Author", back_populates="book_authors")

    __table_args__ = (
        UniqueConstraint("book_id", "author_id", name="uq_book_authors_book_author"),
    )
