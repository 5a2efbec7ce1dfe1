"""
Offset pagination with optional case-insensitive search, shared by the
subject, module, sub-module and question list endpoints.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import func, select

from qbank_admin.core.database import SchemaNotReady, Store
from qbank_admin.core.numbers import SQL_INT_MAX, parse_integer
from qbank_admin.schemas import Page
from qbank_admin.services.filters import BySearch, Filter, SearchField, combine

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
NOT_READY_WARNING = "Database not initialized yet - run migrations / seed."


def _as_int(raw: Any, default: int) -> int:
    value = parse_integer(raw)
    return default if value is None else value


@dataclass(frozen=True)
class PageParams:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    search: Optional[str] = None

    @classmethod
    def coerce(cls, page: Any = None, page_size: Any = None, search: Optional[str] = None) -> "PageParams":
        """Clamp raw query values: page >= 1, 1 <= page_size <= 100, blank search dropped.

        Pages past the end stay empty, but the offset must still fit a SQL integer.
        """
        size = min(max(_as_int(page_size, DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
        p = min(max(_as_int(page, DEFAULT_PAGE), 1), SQL_INT_MAX // size + 1)
        term = search.strip() if search else None
        return cls(page=p, page_size=size, search=term or None)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class Listing:
    """How one entity is listed: what it searches, what it eagerly loads, how rows are rendered."""
    model: Type[Any]
    schema: Type[BaseModel]
    search_fields: Tuple[SearchField, ...]
    options: Tuple[Any, ...] = ()


def total_pages(total: int, page_size: int) -> int:
    return 0 if total == 0 else math.ceil(total / page_size)


def paginate(store: Store, listing: Listing, params: PageParams, filters: Sequence[Filter] = ()) -> Page:
    criteria = list(filters)
    if params.search:
        criteria.append(BySearch(params.search, listing.search_fields))
    where = combine(criteria)
    model = listing.model
    try:
        with store.snapshot() as db:
            total = db.scalar(select(func.count()).select_from(model).where(where)) or 0
            rows = db.scalars(
                select(model).where(where).options(*listing.options)
                .order_by(model.created_at.desc(), model.id.desc())
                .offset(params.offset).limit(params.page_size)
            ).all()
            data = [listing.schema.model_validate(r) for r in rows]
    except SchemaNotReady as e:
        logger.warning(f"[{model.__tablename__}] Database not initialized yet, returning empty page: {e.reason}")
        return Page[listing.schema](data=[], page=DEFAULT_PAGE, page_size=DEFAULT_PAGE_SIZE,
                                    total=0, total_pages=0, warning=NOT_READY_WARNING)
    return Page[listing.schema](data=data, page=params.page, page_size=params.page_size,
                                total=total, total_pages=total_pages(total, params.page_size))
