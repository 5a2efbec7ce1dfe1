import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload, selectinload

from qbank_admin.api.params import get_or_404, is_blank, optional_int, parse_id, require_text
from qbank_admin.core.database import Store, get_db, get_store
from qbank_admin.models.orm import Answer, Module, Question, Subject, SubModule
from qbank_admin.schemas import AnswerIn, Deleted, Page, QuestionDetail, QuestionIn, QuestionOut
from qbank_admin.services.filters import ByParent, SearchField
from qbank_admin.services.pagination import Listing, PageParams, paginate

logger = logging.getLogger(__name__)
router = APIRouter()

_WITH_PARENTS = joinedload(Question.sub_module).joinedload(SubModule.module).joinedload(Module.subject)

QUESTIONS = Listing(
    model=Question, schema=QuestionDetail,
    search_fields=(
        SearchField(Question.text),
        SearchField(SubModule.name, via=(Question.sub_module,)),
        SearchField(Module.name, via=(Question.sub_module, SubModule.module)),
        SearchField(Subject.name, via=(Question.sub_module, SubModule.module, Module.subject)),
    ),
    options=(_WITH_PARENTS, selectinload(Question.answers)),
)


def check_answers(answers: Optional[List[AnswerIn]]) -> List[AnswerIn]:
    if not answers or len(answers) < 2:
        raise HTTPException(400, "At least two answers are required")
    if not any(a.is_correct for a in answers):
        raise HTTPException(400, "At least one answer must be marked as correct")
    return answers


def build_answers(answers: List[AnswerIn]) -> List[Answer]:
    return [Answer(text=a.text, is_correct=bool(a.is_correct)) for a in answers]


@router.get("", response_model=Page[QuestionDetail])
def list_questions(sub_module_id: Optional[str] = Query(None, alias="subModuleId"), page: Optional[str] = None,
                   page_size: Optional[str] = Query(None, alias="pageSize"), search: Optional[str] = None,
                   store: Store = Depends(get_store)):
    parent = optional_int(sub_module_id)
    filters = [ByParent(Question.sub_module_id, parent)] if parent is not None else []
    return paginate(store, QUESTIONS, PageParams.coerce(page, page_size, search), filters)


@router.post("", response_model=QuestionOut, status_code=201)
def create_question(payload: QuestionIn, db: Session = Depends(get_db)):
    text = require_text(payload.text, "Question text is required")
    if is_blank(payload.sub_module_id):
        raise HTTPException(400, "SubModule ID is required")
    answers = check_answers(payload.answers)
    smid = parse_id(payload.sub_module_id, "submodule")
    get_or_404(db, SubModule, smid, "SubModule not found")
    # question and answers land in one commit
    question = Question(text=text, sub_module_id=smid, answers=build_answers(answers))
    db.add(question); db.commit()
    logger.info(f"Created question {question.id} with {len(answers)} answers")
    return QuestionOut.model_validate(question)


@router.get("/{question_id}", response_model=QuestionDetail)
def get_question(question_id: str, db: Session = Depends(get_db)):
    qid = parse_id(question_id, "question")
    question = get_or_404(db, Question, qid, "Question not found", _WITH_PARENTS, selectinload(Question.answers))
    return QuestionDetail.model_validate(question)


@router.put("/{question_id}", response_model=QuestionOut)
def update_question(question_id: str, payload: QuestionIn, db: Session = Depends(get_db)):
    qid = parse_id(question_id, "question")
    text = require_text(payload.text, "Question text is required")
    smid = None
    if not is_blank(payload.sub_module_id):
        smid = parse_id(payload.sub_module_id, "submodule")
        get_or_404(db, SubModule, smid, "SubModule not found")
    if payload.answers is not None:
        check_answers(payload.answers)
    question = get_or_404(db, Question, qid, "Question not found", selectinload(Question.answers))
    question.text = text
    if smid is not None:
        question.sub_module_id = smid
    if payload.answers is not None:
        # delete-orphan drops the previous answer rows
        question.answers = build_answers(payload.answers)
    db.commit()
    return QuestionOut.model_validate(question)


@router.delete("/{question_id}", response_model=Deleted)
def delete_question(question_id: str, db: Session = Depends(get_db)):
    qid = parse_id(question_id, "question")
    question = get_or_404(db, Question, qid, "Question not found")
    db.delete(question); db.commit()
    return Deleted(message="Question deleted successfully")
