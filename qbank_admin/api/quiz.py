import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from qbank_admin.api.params import is_blank, optional_int, parse_id
from qbank_admin.core.database import get_db
from qbank_admin.core.numbers import SQL_INT_MAX, parse_integer
from qbank_admin.models.orm import Question
from qbank_admin.schemas import QuizQuestion, QuizScore, QuizSubmission
from qbank_admin.services.quiz import QuizSelection, format_question, score_answers, select_questions

logger = logging.getLogger(__name__)
router = APIRouter()


def _flag(raw: Optional[str]) -> bool:
    return raw == "true"


def _limit(raw: Optional[str]) -> Optional[int]:
    if is_blank(raw):
        return None
    value = parse_integer(raw)
    if value is None or value < 1:
        raise HTTPException(400, "Limit must be a positive integer")
    return min(value, SQL_INT_MAX)


@router.get("", response_model=List[QuizQuestion])
def get_quiz(subject: Optional[str] = None,
             modules: List[str] = Query(default=[]),
             all_modules: Optional[str] = Query(None, alias="allModules"),
             sub_modules: List[str] = Query(default=[], alias="subModules"),
             all_sub_modules: Optional[str] = Query(None, alias="allSubModules"),
             all_questions: Optional[str] = Query(None, alias="allQuestions"),
             limit: Optional[str] = None,
             db: Session = Depends(get_db)):
    selection = QuizSelection(
        subject=None if is_blank(subject) else parse_id(subject, "subject"),
        modules=tuple(parse_id(m, "module") for m in modules),
        all_modules=_flag(all_modules),
        sub_modules=tuple(parse_id(s, "submodule") for s in sub_modules),
        all_sub_modules=_flag(all_sub_modules),
        all_questions=_flag(all_questions),
        limit=_limit(limit),
    )
    questions = select_questions(db, selection)
    logger.debug(f"Quiz selection {selection} matched {len(questions)} questions")
    return [format_question(q) for q in questions]


@router.post("/score", response_model=QuizScore)
def score_quiz(payload: QuizSubmission, db: Session = Depends(get_db)):
    ids = {i for i in (optional_int(p.question_id) for p in payload.answers) if i is not None}
    questions = db.scalars(
        select(Question).where(Question.id.in_(ids)).options(selectinload(Question.answers))
    ).all() if ids else []
    return score_answers(questions, [(p.question_id, p.option_id) for p in payload.answers])
