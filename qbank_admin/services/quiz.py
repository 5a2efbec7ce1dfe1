"""
Quiz question selection and scoring.

A quiz is scoped by a coarse selection (subject, modules, sub-modules)
which resolves to the concrete sub-module ids bounding the question query.
The rules form a priority chain; the first one that applies wins:

1. explicit sub-modules (unless ``all_sub_modules``)
2. every sub-module of the explicit modules (unless ``all_modules``)
3. every sub-module of the subject
4. no restriction
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from qbank_admin.core.numbers import parse_int
from qbank_admin.models.orm import Module, Question, SubModule
from qbank_admin.schemas import QuizOption, QuizQuestion, QuizScore
from qbank_admin.services.filters import ById

DEFAULT_QUIZ_LIMIT = 10


@dataclass(frozen=True)
class QuizSelection:
    subject: Optional[int] = None
    modules: Tuple[int, ...] = ()
    all_modules: bool = False
    sub_modules: Tuple[int, ...] = ()
    all_sub_modules: bool = False
    all_questions: bool = False
    limit: Optional[int] = None


def resolve_scope(db: Session, sel: QuizSelection) -> Optional[ById]:
    """Sub-module restriction for the selection, or None when every question is eligible."""
    if not sel.all_sub_modules and sel.sub_modules:
        return ById(Question.sub_module_id, tuple(sel.sub_modules))
    if not sel.all_modules and sel.modules:
        ids = db.scalars(select(SubModule.id).where(SubModule.module_id.in_(sel.modules))).all()
        return ById(Question.sub_module_id, tuple(ids))
    if sel.subject is not None:
        module_ids = db.scalars(select(Module.id).where(Module.subject_id == sel.subject)).all()
        ids = db.scalars(select(SubModule.id).where(SubModule.module_id.in_(module_ids))).all()
        return ById(Question.sub_module_id, tuple(ids))
    return None


def select_questions(db: Session, sel: QuizSelection) -> List[Question]:
    stmt = select(Question).options(selectinload(Question.answers)).order_by(
        Question.created_at.desc(), Question.id.desc()
    )
    scope = resolve_scope(db, sel)
    if scope is not None:
        stmt = stmt.where(scope.predicate())
    if not sel.all_questions:
        stmt = stmt.limit(sel.limit if sel.limit is not None else DEFAULT_QUIZ_LIMIT)
    return list(db.scalars(stmt).all())


def format_question(q: Question) -> QuizQuestion:
    return QuizQuestion(
        id=str(q.id),
        text=q.text,
        options=[QuizOption(id=str(a.id), text=a.text, is_correct=a.is_correct) for a in q.answers],
    )


def score_answers(questions: Iterable[Question], picks: Iterable[Tuple[Any, Any]]) -> QuizScore:
    """Tally picks of ``(question_id, option_id)``.

    Only the first pick per question counts, and ``total`` is the number of
    distinct questions picked. Unanswered or unknown picks score zero.
    """
    correct_by_question: Dict[int, set] = {
        q.id: {a.id for a in q.answers if a.is_correct} for q in questions
    }
    chosen: Dict[Any, Optional[int]] = {}
    for question_id, option_id in picks:
        qid = parse_int(question_id)
        key = qid if qid is not None else str(question_id).strip()
        chosen.setdefault(key, parse_int(option_id))
    correct = sum(
        1 for key, option in chosen.items()
        if option is not None and option in correct_by_question.get(key, ())
    )
    total = len(chosen)
    percentage = round(correct / total * 100, 2) if total else 0.0
    return QuizScore(correct=correct, total=total, percentage=percentage)
