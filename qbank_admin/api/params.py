from typing import Any, Optional, Type, TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from qbank_admin.core.numbers import parse_int

M = TypeVar("M")


def parse_id(raw: Any, label: str) -> int:
    """Numeric id from a path/body/query value; 400 ``Invalid <label> ID`` otherwise."""
    value = parse_int(raw)
    if value is None:
        raise HTTPException(400, f"Invalid {label} ID")
    return value


def optional_int(raw: Any) -> Optional[int]:
    """Lenient variant for list filters: malformed values are ignored."""
    return parse_int(raw)


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(value: Optional[str], message: str) -> str:
    if is_blank(value):
        raise HTTPException(400, message)
    return value.strip()


def get_or_404(db: Session, model: Type[M], ident: int, message: str, *options: Any) -> M:
    obj = db.get(model, ident, options=list(options) or None)
    if obj is None:
        raise HTTPException(404, message)
    return obj
