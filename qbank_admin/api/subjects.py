import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload

from qbank_admin.api.params import get_or_404, parse_id, require_text
from qbank_admin.core.database import Store, get_db, get_store
from qbank_admin.models.orm import Subject
from qbank_admin.schemas import Deleted, Page, SubjectDetail, SubjectIn, SubjectOut
from qbank_admin.services.filters import SearchField
from qbank_admin.services.pagination import Listing, PageParams, paginate

logger = logging.getLogger(__name__)
router = APIRouter()

SUBJECTS = Listing(
    model=Subject, schema=SubjectOut,
    search_fields=(SearchField(Subject.name), SearchField(Subject.description)),
)


@router.get("", response_model=Page[SubjectOut])
def list_subjects(page: Optional[str] = None, page_size: Optional[str] = Query(None, alias="pageSize"),
                  search: Optional[str] = None, store: Store = Depends(get_store)):
    return paginate(store, SUBJECTS, PageParams.coerce(page, page_size, search))


@router.post("", response_model=SubjectOut, status_code=201)
def create_subject(payload: SubjectIn, db: Session = Depends(get_db)):
    name = require_text(payload.name, "Name is required")
    subject = Subject(name=name, description=payload.description)
    db.add(subject); db.commit()
    logger.info(f"Created subject {subject.id}")
    return SubjectOut.model_validate(subject)


@router.get("/{subject_id}", response_model=SubjectDetail)
def get_subject(subject_id: str, db: Session = Depends(get_db)):
    sid = parse_id(subject_id, "subject")
    subject = get_or_404(db, Subject, sid, "Subject not found", selectinload(Subject.modules))
    return SubjectDetail.model_validate(subject)


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(subject_id: str, payload: SubjectIn, db: Session = Depends(get_db)):
    sid = parse_id(subject_id, "subject")
    name = require_text(payload.name, "Name is required")
    subject = get_or_404(db, Subject, sid, "Subject not found")
    subject.name = name
    if "description" in payload.model_fields_set:
        subject.description = payload.description
    db.commit()
    return SubjectOut.model_validate(subject)


@router.delete("/{subject_id}", response_model=Deleted)
def delete_subject(subject_id: str, db: Session = Depends(get_db)):
    sid = parse_id(subject_id, "subject")
    subject = get_or_404(db, Subject, sid, "Subject not found")
    db.delete(subject); db.commit()
    logger.info(f"Deleted subject {sid} and its descendants")
    return Deleted(message="Subject deleted successfully")
