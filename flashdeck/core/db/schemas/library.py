from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flashdeck.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .progress import StudyProgress


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="books")
    sections: Mapped[list["Section"]] = relationship(
        "Section", back_populates="book", cascade="all, delete-orphan"
    )


class Section(Base):
    __tablename__ = "sections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    book: Mapped["Book"] = relationship("Book", back_populates="sections")
    flashcards: Mapped[list["Flashcard"]] = relationship(
        "Flashcard", back_populates="section", cascade="all, delete-orphan"
    )


class Flashcard(Base):
    __tablename__ = "flashcards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    section_id: Mapped[int] = mapped_column(
        ForeignKey("sections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    front_text: Mapped[str] = mapped_column(Text, nullable=False)
    back_text: Mapped[str] = mapped_column(Text, nullable=False)

    # Presentation metadata, passed through to clients untouched
    front_gradient: Mapped[Optional[str]] = mapped_column(
        String, nullable=True, default="gradient-1"
    )
    back_gradient: Mapped[Optional[str]] = mapped_column(
        String, nullable=True, default="gradient-2"
    )
    front_custom_gradient: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    back_custom_gradient: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    front_font: Mapped[Optional[str]] = mapped_column(String, nullable=True, default="Inter")
    back_font: Mapped[Optional[str]] = mapped_column(String, nullable=True, default="Inter")
    front_image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    back_image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    front_audio: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    back_audio: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    section: Mapped["Section"] = relationship("Section", back_populates="flashcards")
    progress: Mapped[list["StudyProgress"]] = relationship(
        "StudyProgress", back_populates="flashcard", cascade="all, delete-orphan"
    )


__all__ = [
    "Book",
    "Section",
    "Flashcard",
]
