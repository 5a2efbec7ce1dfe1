"""
Query filter variants.

Each list or quiz query is narrowed by a handful of filter values; every
value knows how to render itself as a SQLAlchemy predicate and ``combine``
ANDs them together. There is no shared mutable where-clause.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Tuple, Union

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column: Any, term: str) -> ColumnElement[bool]:
    """Case-insensitive substring match."""
    return column.ilike(f"%{escape_like(term)}%", escape="\\")


@dataclass(frozen=True)
class SearchField:
    """A searchable column, optionally reached through relationships of the listed entity.

    ``via`` is walked outward from the listed entity, e.g.
    ``SearchField(Subject.name, via=(Module.subject,))`` when listing modules.
    """
    column: Any
    via: Tuple[Any, ...] = ()

    def matches(self, term: str) -> ColumnElement[bool]:
        clause = contains(self.column, term)
        for rel in reversed(self.via):
            clause = rel.has(clause)
        return clause


@dataclass(frozen=True)
class ById:
    column: Any
    ids: Tuple[int, ...]

    def predicate(self) -> ColumnElement[bool]:
        # An empty id set matches nothing
        return self.column.in_(self.ids)


@dataclass(frozen=True)
class ByParent:
    column: Any
    parent_id: int

    def predicate(self) -> ColumnElement[bool]:
        return self.column == self.parent_id


@dataclass(frozen=True)
class BySearch:
    term: str
    fields: Sequence[SearchField]

    def predicate(self) -> ColumnElement[bool]:
        return or_(*(f.matches(self.term) for f in self.fields))


Filter = Union[ById, ByParent, BySearch]


def combine(filters: Iterable[Filter]) -> ColumnElement[bool]:
    return and_(true(), *(f.predicate() for f in filters))
