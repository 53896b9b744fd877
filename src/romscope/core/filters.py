"""Filter compilation (core domain).

Parsed terms are compiled into a small clause tree over the catalog fields.
The tree is storage-agnostic: it can evaluate itself against a record in
memory, and storage adapters translate it into their native query form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple, Union

from romscope.core.models import CATALOG_FIELDS, CatalogRecord


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring test on one catalog field.

    ``needle`` is stored already lower-cased.
    """

    field: str
    needle: str

    def __post_init__(self) -> None:
        if self.field not in CATALOG_FIELDS:
            raise ValueError(f"Unknown catalog field: {self.field}")

    def matches(self, record: CatalogRecord) -> bool:
        return self.needle in record.field(self.field).lower()


@dataclass(frozen=True)
class Not:
    clause: "Clause"

    def matches(self, record: CatalogRecord) -> bool:
        return not self.clause.matches(record)


@dataclass(frozen=True)
class AnyOf:
    clauses: Tuple["Clause", ...]

    def matches(self, record: CatalogRecord) -> bool:
        return any(clause.matches(record) for clause in self.clauses)


@dataclass(frozen=True)
class AllOf:
    """Conjunction; an empty AllOf matches every record."""

    clauses: Tuple["Clause", ...] = ()

    def matches(self, record: CatalogRecord) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


Clause = Union[Contains, Not, AnyOf, AllOf]


@dataclass(frozen=True)
class FilterSpec:
    """Declarative filter/sort/limit request against the catalog."""

    where: AllOf
    max_results: int
    order_by: Tuple[str, ...] = CATALOG_FIELDS

    @property
    def limit(self) -> int:
        # One extra row lets the executor tell "at the limit" from "over it".
        return self.max_results + 1

    def matches(self, record: CatalogRecord) -> bool:
        return self.where.matches(record)


def include_clause(term: str) -> AnyOf:
    """The term must appear in at least one catalog field."""

    needle = term.lower()
    return AnyOf(tuple(Contains(name, needle) for name in CATALOG_FIELDS))


def exclude_clause(term: str) -> AllOf:
    """The term must appear in none of the catalog fields."""

    needle = term.lower()
    return AllOf(tuple(Not(Contains(name, needle)) for name in CATALOG_FIELDS))


def compile_filter(
    positives: Iterable[str],
    negatives: Iterable[str],
    max_results: int,
) -> FilterSpec:
    """Compile parsed terms into a FilterSpec.

    Every positive and every negative clause must hold (AND across all terms,
    whatever their polarity). No terms at all yields an unfiltered spec.
    """

    if max_results < 1:
        raise ValueError("max_results must be at least 1")

    clauses: list[Clause] = [include_clause(term) for term in positives]
    clauses.extend(exclude_clause(term) for term in negatives)
    return FilterSpec(where=AllOf(tuple(clauses)), max_results=max_results)
