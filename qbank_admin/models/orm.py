from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase): pass


class TimestampMixin:
    """Application-side timestamps; microsecond resolution keeps list ordering stable."""
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class Subject(TimestampMixin, Base):
    __tablename__ = "subjects"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    modules: Mapped[List["Module"]] = relationship(
        back_populates="subject", cascade="all, delete-orphan", order_by="Module.id"
    )


class Module(TimestampMixin, Base):
    __tablename__ = "modules"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subject_id: Mapped[int] = mapped_column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), index=True)
    subject: Mapped[Subject] = relationship(back_populates="modules")
    sub_modules: Mapped[List["SubModule"]] = relationship(
        back_populates="module", cascade="all, delete-orphan", order_by="SubModule.id"
    )


class SubModule(TimestampMixin, Base):
    __tablename__ = "sub_modules"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    module_id: Mapped[int] = mapped_column(Integer, ForeignKey("modules.id", ondelete="CASCADE"), index=True)
    module: Mapped[Module] = relationship(back_populates="sub_modules")
    questions: Mapped[List["Question"]] = relationship(
        back_populates="sub_module", cascade="all, delete-orphan", order_by="Question.id"
    )


class Question(TimestampMixin, Base):
    __tablename__ = "questions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text)
    sub_module_id: Mapped[int] = mapped_column(Integer, ForeignKey("sub_modules.id", ondelete="CASCADE"), index=True)
    sub_module: Mapped[SubModule] = relationship(back_populates="questions")
    answers: Mapped[List["Answer"]] = relationship(
        back_populates="question", cascade="all, delete-orphan", order_by="Answer.id"
    )


class Answer(Base):
    __tablename__ = "answers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), index=True)
    question: Mapped[Question] = relationship(back_populates="answers")
