# app/services/filters.py
"""
Typed query filters.

A Filter is a conjunction of predicates. Predicates are plain values
naming model attributes; `Filter.clauses(model)` turns them into
SQLAlchemy WHERE clauses for that model.

    flt = (
        FilterBuilder()
        .intersects("categories", category_ids)
        .contains_text(("title", "english_title"), "inter")
        .build()
    )
    select(Movie).where(*flt.clauses(Movie))
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Tuple

from sqlalchemy import or_
from sqlalchemy.sql.elements import ColumnElement

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally"""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class Equals:
    attr: str
    value: Any

    def clause(self, model) -> ColumnElement:
        return getattr(model, self.attr) == self.value


@dataclass(frozen=True)
class MemberOf:
    """Scalar column value is one of `values`"""
    attr: str
    values: Tuple[Any, ...]

    def clause(self, model) -> ColumnElement:
        return getattr(model, self.attr).in_(self.values)


@dataclass(frozen=True)
class Intersects:
    """
    At least one related row's primary key is in `ids`.

    An empty id set matches nothing.
    """
    relation: str
    ids: Tuple[Any, ...]

    def clause(self, model) -> ColumnElement:
        relationship = getattr(model, self.relation)
        target_pk = relationship.property.mapper.primary_key[0]
        return relationship.any(target_pk.in_(self.ids))


@dataclass(frozen=True)
class ContainsText:
    """Case-insensitive substring match against any of `fields`"""
    fields: Tuple[str, ...]
    text: str

    def clause(self, model) -> ColumnElement:
        pattern = f"%{escape_like(self.text)}%"
        return or_(
            *(getattr(model, name).ilike(pattern, escape=LIKE_ESCAPE) for name in self.fields)
        )


@dataclass(frozen=True)
class Filter:
    predicates: Tuple[Any, ...] = field(default_factory=tuple)

    def clauses(self, model) -> List[ColumnElement]:
        return [predicate.clause(model) for predicate in self.predicates]

    def __bool__(self) -> bool:
        return bool(self.predicates)


class FilterBuilder:
    """Collects optional predicates; order of calls does not matter"""

    def __init__(self):
        self._predicates: list = []

    def add(self, predicate) -> "FilterBuilder":
        self._predicates.append(predicate)
        return self

    def equals(self, field_name: str, value: Any) -> "FilterBuilder":
        return self.add(Equals(field_name, value))

    def member_of(self, field_name: str, values: Iterable[Any]) -> "FilterBuilder":
        return self.add(MemberOf(field_name, tuple(values)))

    def intersects(self, relation: str, ids: Iterable[Any]) -> "FilterBuilder":
        return self.add(Intersects(relation, tuple(ids)))

    def contains_text(self, fields: Iterable[str], text: str) -> "FilterBuilder":
        return self.add(ContainsText(tuple(fields), text))

    def build(self) -> Filter:
        return Filter(tuple(self._predicates))
