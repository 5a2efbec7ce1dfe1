import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload, selectinload

from qbank_admin.api.params import get_or_404, is_blank, optional_int, parse_id, require_text
from qbank_admin.core.database import Store, get_db, get_store
from qbank_admin.models.orm import Module, Subject
from qbank_admin.schemas import Deleted, ModuleDetail, ModuleIn, ModuleOut, ModuleWithSubject, Page
from qbank_admin.services.filters import ByParent, SearchField
from qbank_admin.services.pagination import Listing, PageParams, paginate

logger = logging.getLogger(__name__)
router = APIRouter()

MODULES = Listing(
    model=Module, schema=ModuleWithSubject,
    search_fields=(
        SearchField(Module.name),
        SearchField(Module.description),
        SearchField(Subject.name, via=(Module.subject,)),
    ),
    options=(joinedload(Module.subject),),
)


@router.get("", response_model=Page[ModuleWithSubject])
def list_modules(subject_id: Optional[str] = Query(None, alias="subjectId"), page: Optional[str] = None,
                 page_size: Optional[str] = Query(None, alias="pageSize"), search: Optional[str] = None,
                 store: Store = Depends(get_store)):
    parent = optional_int(subject_id)
    filters = [ByParent(Module.subject_id, parent)] if parent is not None else []
    return paginate(store, MODULES, PageParams.coerce(page, page_size, search), filters)


@router.post("", response_model=ModuleOut, status_code=201)
def create_module(payload: ModuleIn, db: Session = Depends(get_db)):
    name = require_text(payload.name, "Name is required")
    if is_blank(payload.subject_id):
        raise HTTPException(400, "Subject ID is required")
    sid = parse_id(payload.subject_id, "subject")
    get_or_404(db, Subject, sid, "Subject not found")
    module = Module(name=name, description=payload.description, subject_id=sid)
    db.add(module); db.commit()
    logger.info(f"Created module {module.id} under subject {sid}")
    return ModuleOut.model_validate(module)


@router.get("/{module_id}", response_model=ModuleDetail)
def get_module(module_id: str, db: Session = Depends(get_db)):
    mid = parse_id(module_id, "module")
    module = get_or_404(db, Module, mid, "Module not found",
                        joinedload(Module.subject), selectinload(Module.sub_modules))
    return ModuleDetail.model_validate(module)


@router.put("/{module_id}", response_model=ModuleOut)
def update_module(module_id: str, payload: ModuleIn, db: Session = Depends(get_db)):
    mid = parse_id(module_id, "module")
    name = require_text(payload.name, "Name is required")
    sid = None
    if not is_blank(payload.subject_id):
        sid = parse_id(payload.subject_id, "subject")
        get_or_404(db, Subject, sid, "Subject not found")
    module = get_or_404(db, Module, mid, "Module not found")
    module.name = name
    if "description" in payload.model_fields_set:
        module.description = payload.description
    if sid is not None:
        module.subject_id = sid
    db.commit()
    return ModuleOut.model_validate(module)


@router.delete("/{module_id}", response_model=Deleted)
def delete_module(module_id: str, db: Session = Depends(get_db)):
    mid = parse_id(module_id, "module")
    module = get_or_404(db, Module, mid, "Module not found")
    db.delete(module); db.commit()
    logger.info(f"Deleted module {mid} and its descendants")
    return Deleted(message="Module deleted successfully")
