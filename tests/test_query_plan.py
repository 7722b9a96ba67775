import pytest

from registrar.application.dto import CourseFilter, ListOptions, StudentFilter
from registrar.application.query_plan import (
    Predicate, SortKey, build_course_plan, build_student_plan,
)
from registrar.domain.errors import ValidationFailure


def test_empty_filter_has_no_predicates():
    """Без фильтра - никаких ограничений и пагинация по умолчанию"""
    plan = build_student_plan()
    assert plan.predicates == ()
    assert plan.sort is None
    assert plan.limit == 10
    assert plan.offset == 0


def test_omitted_fields_do_not_constrain():
    plan = build_student_plan(StudentFilter(major="CS"))
    assert plan.predicates == (Predicate("major", "eq", "CS"),)


def test_range_bounds_are_independent():
    plan = build_student_plan(StudentFilter(min_age=18))
    assert plan.predicates == (Predicate("age", "gte", 18),)

    plan = build_student_plan(StudentFilter(max_age=25))
    assert plan.predicates == (Predicate("age", "lte", 25),)

    plan = build_student_plan(StudentFilter(min_age=18, max_age=25))
    assert plan.predicates == (Predicate("age", "gte", 18), Predicate("age", "lte", 25))


def test_zero_is_a_real_bound():
    """0 - настоящая граница, а не "не задано" """
    plan = build_student_plan(StudentFilter(min_age=0))
    assert plan.predicates == (Predicate("age", "gte", 0),)

    plan = build_course_plan(CourseFilter(min_credits=0, max_credits=0))
    assert plan.predicates == (Predicate("credits", "gte", 0), Predicate("credits", "lte", 0))


def test_course_filter_operators():
    plan = build_course_plan(CourseFilter(code_prefix="CS", title_contains="algo", instructor="Knuth"))
    assert set(plan.predicates) == {
        Predicate("code", "istartswith", "CS"),
        Predicate("title", "icontains", "algo"),
        Predicate("instructor", "eq", "Knuth"),
    }


def test_name_contains_is_case_insensitive_substring():
    plan = build_student_plan(StudentFilter(name_contains="an"))
    assert plan.predicates == (Predicate("name", "icontains", "an"),)


@pytest.mark.parametrize("requested,expected", [(None, 10), (0, 10), (1, 1), (50, 50), (51, 50), (1000, 50)])
def test_limit_is_clamped(requested, expected):
    plan = build_course_plan(options=ListOptions(limit=requested))
    assert plan.limit == expected


def test_negative_pagination_is_rejected():
    with pytest.raises(ValidationFailure):
        build_course_plan(options=ListOptions(limit=-1))
    with pytest.raises(ValidationFailure):
        build_course_plan(options=ListOptions(offset=-1))


def test_sort_ascending_unless_exactly_desc():
    assert build_student_plan(options=ListOptions(sort_by="age")).sort == SortKey("age", False)
    assert build_student_plan(options=ListOptions(sort_by="age", sort_order="DESC")).sort == SortKey("age", True)
    assert build_student_plan(options=ListOptions(sort_by="age", sort_order="desc")).sort == SortKey("age", False)
    assert build_student_plan(options=ListOptions(sort_order="DESC")).sort is None


def test_unknown_sort_field_is_rejected():
    with pytest.raises(ValidationFailure):
        build_student_plan(options=ListOptions(sort_by="password_hash"))
    with pytest.raises(ValidationFailure):
        build_course_plan(options=ListOptions(sort_by="age"))


def test_offset_passes_through():
    assert build_student_plan(options=ListOptions(offset=20)).offset == 20
