"""
Wire schemas. JSON keys are camelCase, Python attributes snake_case.
"""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Ids arrive as numbers or numeric strings; handlers parse them
RawId = Optional[Union[int, str]]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- entities ----------

class SubjectOut(CamelModel):
    id: int; name: str; description: Optional[str] = None
    created_at: datetime; updated_at: datetime


class ModuleOut(CamelModel):
    id: int; name: str; description: Optional[str] = None; subject_id: int
    created_at: datetime; updated_at: datetime


class SubModuleOut(CamelModel):
    id: int; name: str; description: Optional[str] = None; module_id: int
    created_at: datetime; updated_at: datetime


class AnswerOut(CamelModel):
    id: int; text: str; is_correct: bool; question_id: int


class QuestionOut(CamelModel):
    id: int; text: str; sub_module_id: int
    created_at: datetime; updated_at: datetime
    answers: List[AnswerOut] = []


class SubjectDetail(SubjectOut):
    modules: List[ModuleOut] = []


class ModuleWithSubject(ModuleOut):
    subject: SubjectOut


class ModuleDetail(ModuleWithSubject):
    sub_modules: List[SubModuleOut] = []


class SubModuleWithParents(SubModuleOut):
    module: ModuleWithSubject


class SubModuleDetail(SubModuleWithParents):
    questions: List[QuestionOut] = []


class QuestionDetail(QuestionOut):
    sub_module: SubModuleWithParents


# ---------- inputs ----------

class SubjectIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ModuleIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    subject_id: RawId = None


class SubModuleIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    module_id: RawId = None


class AnswerIn(CamelModel):
    text: str
    is_correct: Optional[bool] = False


class QuestionIn(CamelModel):
    text: Optional[str] = None
    sub_module_id: RawId = None
    answers: Optional[List[AnswerIn]] = None


# ---------- envelopes ----------

class Page(CamelModel, Generic[T]):
    data: List[T]
    page: int
    page_size: int
    total: int
    total_pages: int
    warning: Optional[str] = None


class Deleted(BaseModel):
    message: str


# ---------- quiz ----------

class QuizOption(CamelModel):
    id: str; text: str; is_correct: bool


class QuizQuestion(CamelModel):
    id: str; text: str
    options: List[QuizOption]


class QuizPick(CamelModel):
    question_id: Union[int, str]
    option_id: Optional[Union[int, str]] = None


class QuizSubmission(CamelModel):
    answers: List[QuizPick] = Field(default_factory=list)


class QuizScore(CamelModel):
    correct: int
    total: int
    percentage: float
