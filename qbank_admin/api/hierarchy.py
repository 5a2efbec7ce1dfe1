"""Unpaginated child lookups used to populate cascading selects."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select

from qbank_admin.api.params import is_blank
from qbank_admin.core.database import SchemaNotReady, Store, get_store
from qbank_admin.core.numbers import parse_int
from qbank_admin.models.orm import Module, SubModule
from qbank_admin.schemas import ModuleOut, SubModuleOut

logger = logging.getLogger(__name__)
router = APIRouter()


def _required_number(raw: Optional[str], label: str) -> int:
    if is_blank(raw):
        raise HTTPException(400, f"{label} ID is required as a query parameter")
    value = parse_int(raw)
    if value is None:
        raise HTTPException(400, f"{label} ID must be a number")
    return value


@router.get("/modules-by-subject", response_model=List[ModuleOut])
def modules_by_subject(subject_id: Optional[str] = Query(None, alias="subjectId"), store: Store = Depends(get_store)):
    sid = _required_number(subject_id, "Subject")
    try:
        with store.session() as db:
            rows = db.scalars(select(Module).where(Module.subject_id == sid)
                              .order_by(Module.created_at.desc(), Module.id.desc())).all()
            return [ModuleOut.model_validate(r) for r in rows]
    except SchemaNotReady as e:
        logger.warning(f"[modules-by-subject] Database not initialized yet: {e.reason}")
        return []


@router.get("/submodules-by-module", response_model=List[SubModuleOut])
def submodules_by_module(module_id: Optional[str] = Query(None, alias="moduleId"), store: Store = Depends(get_store)):
    mid = _required_number(module_id, "Module")
    try:
        with store.session() as db:
            rows = db.scalars(select(SubModule).where(SubModule.module_id == mid)
                              .order_by(SubModule.created_at.desc(), SubModule.id.desc())).all()
            return [SubModuleOut.model_validate(r) for r in rows]
    except SchemaNotReady as e:
        logger.warning(f"[submodules-by-module] Database not initialized yet: {e.reason}")
        return []
