"""Построение плана запроса из разреженных фильтров и опций списка.

План не зависит от хранилища: репозиторий сам переводит его в SQL.
Фильтры проверяются через ``is not None``, поэтому 0 является настоящей
границей диапазона, а не "пустым" значением.
"""
from dataclasses import dataclass

from ..domain.errors import ValidationFailure
from .dto import CourseFilter, ListOptions, StudentFilter

DEFAULT_LIMIT = 10
MAX_LIMIT = 50

STUDENT_SORT_FIELDS = frozenset({"id", "name", "email", "age", "major"})
COURSE_SORT_FIELDS = frozenset({"id", "title", "code", "credits", "instructor"})


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str  # eq | icontains | istartswith | gte | lte
    value: object


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class QueryPlan:
    predicates: tuple[Predicate, ...] = ()
    sort: SortKey | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def _range(field: str, lower: int | None, upper: int | None) -> list[Predicate]:
    out = []
    if lower is not None:
        out.append(Predicate(field, "gte", lower))
    if upper is not None:
        out.append(Predicate(field, "lte", upper))
    return out


def _shape_options(options: ListOptions | None, sortable: frozenset[str]) -> tuple[SortKey | None, int, int]:
    options = options or ListOptions()

    sort = None
    if options.sort_by is not None:
        if options.sort_by not in sortable:
            raise ValidationFailure(f"Cannot sort by {options.sort_by!r}")
        sort = SortKey(options.sort_by, descending=options.sort_order == "DESC")

    # 0 и отсутствие limit означают размер страницы по умолчанию
    limit = options.limit or DEFAULT_LIMIT
    if limit < 0:
        raise ValidationFailure("limit must not be negative")
    offset = 0 if options.offset is None else options.offset
    if offset < 0:
        raise ValidationFailure("offset must not be negative")
    # больше MAX_LIMIT молча не отдаём
    return sort, min(limit, MAX_LIMIT), offset


def build_student_plan(filter: StudentFilter | None = None, options: ListOptions | None = None) -> QueryPlan:
    f = filter or StudentFilter()
    predicates = []
    if f.major is not None:
        predicates.append(Predicate("major", "eq", f.major))
    if f.name_contains is not None:
        predicates.append(Predicate("name", "icontains", f.name_contains))
    predicates += _range("age", f.min_age, f.max_age)

    sort, limit, offset = _shape_options(options, STUDENT_SORT_FIELDS)
    return QueryPlan(tuple(predicates), sort, limit, offset)


def build_course_plan(filter: CourseFilter | None = None, options: ListOptions | None = None) -> QueryPlan:
    f = filter or CourseFilter()
    predicates = []
    if f.instructor is not None:
        predicates.append(Predicate("instructor", "eq", f.instructor))
    if f.title_contains is not None:
        predicates.append(Predicate("title", "icontains", f.title_contains))
    if f.code_prefix is not None:
        predicates.append(Predicate("code", "istartswith", f.code_prefix))
    predicates += _range("credits", f.min_credits, f.max_credits)

    sort, limit, offset = _shape_options(options, COURSE_SORT_FIELDS)
    return QueryPlan(tuple(predicates), sort, limit, offset)
