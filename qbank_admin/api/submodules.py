import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload, selectinload

from qbank_admin.api.params import get_or_404, is_blank, optional_int, parse_id, require_text
from qbank_admin.core.database import Store, get_db, get_store
from qbank_admin.models.orm import Module, Question, Subject, SubModule
from qbank_admin.schemas import Deleted, Page, SubModuleDetail, SubModuleIn, SubModuleOut, SubModuleWithParents
from qbank_admin.services.filters import ByParent, SearchField
from qbank_admin.services.pagination import Listing, PageParams, paginate

logger = logging.getLogger(__name__)
router = APIRouter()

SUB_MODULES = Listing(
    model=SubModule, schema=SubModuleWithParents,
    search_fields=(
        SearchField(SubModule.name),
        SearchField(SubModule.description),
        SearchField(Module.name, via=(SubModule.module,)),
        SearchField(Subject.name, via=(SubModule.module, Module.subject)),
    ),
    options=(joinedload(SubModule.module).joinedload(Module.subject),),
)


@router.get("", response_model=Page[SubModuleWithParents])
def list_submodules(module_id: Optional[str] = Query(None, alias="moduleId"), page: Optional[str] = None,
                    page_size: Optional[str] = Query(None, alias="pageSize"), search: Optional[str] = None,
                    store: Store = Depends(get_store)):
    parent = optional_int(module_id)
    filters = [ByParent(SubModule.module_id, parent)] if parent is not None else []
    return paginate(store, SUB_MODULES, PageParams.coerce(page, page_size, search), filters)


@router.post("", response_model=SubModuleOut, status_code=201)
def create_submodule(payload: SubModuleIn, db: Session = Depends(get_db)):
    name = require_text(payload.name, "Name is required")
    if is_blank(payload.module_id):
        raise HTTPException(400, "Module ID is required")
    mid = parse_id(payload.module_id, "module")
    get_or_404(db, Module, mid, "Module not found")
    sub_module = SubModule(name=name, description=payload.description, module_id=mid)
    db.add(sub_module); db.commit()
    logger.info(f"Created submodule {sub_module.id} under module {mid}")
    return SubModuleOut.model_validate(sub_module)


@router.get("/{submodule_id}", response_model=SubModuleDetail)
def get_submodule(submodule_id: str, db: Session = Depends(get_db)):
    smid = parse_id(submodule_id, "submodule")
    sub_module = get_or_404(
        db, SubModule, smid, "Submodule not found",
        joinedload(SubModule.module).joinedload(Module.subject),
        selectinload(SubModule.questions).selectinload(Question.answers),
    )
    return SubModuleDetail.model_validate(sub_module)


@router.put("/{submodule_id}", response_model=SubModuleOut)
def update_submodule(submodule_id: str, payload: SubModuleIn, db: Session = Depends(get_db)):
    smid = parse_id(submodule_id, "submodule")
    name = require_text(payload.name, "Name is required")
    mid = None
    if not is_blank(payload.module_id):
        mid = parse_id(payload.module_id, "module")
        get_or_404(db, Module, mid, "Module not found")
    sub_module = get_or_404(db, SubModule, smid, "Submodule not found")
    sub_module.name = name
    if "description" in payload.model_fields_set:
        sub_module.description = payload.description
    if mid is not None:
        sub_module.module_id = mid
    db.commit()
    return SubModuleOut.model_validate(sub_module)


@router.delete("/{submodule_id}", response_model=Deleted)
def delete_submodule(submodule_id: str, db: Session = Depends(get_db)):
    smid = parse_id(submodule_id, "submodule")
    sub_module = get_or_404(db, SubModule, smid, "Submodule not found")
    db.delete(sub_module); db.commit()
    logger.info(f"Deleted submodule {smid} and its questions")
    return Deleted(message="Submodule deleted successfully")
