from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from registrar.application.dto import CourseFilter, ListOptions, StudentFilter
from registrar.application.query_plan import build_course_plan, build_student_plan
from registrar.domain.errors import TransientStoreFailure, ValidationFailure
from registrar.infrastructure.repositories import CourseRepository, StudentRepository


@pytest.fixture
def students(db):
    return StudentRepository(db)


@pytest.fixture
def courses(db):
    return CourseRepository(db)


def _seed_students(students):
    students.insert(name="Ana Lopez", email="ana@x.com", age=20, major="CS")
    students.insert(name="Bob", email="bob@x.com", age=0)
    students.insert(name="Diana", email="diana@x.com", age=31, major="Math")


def _names(rows):
    return sorted(r.name for r in rows)


def test_insert_assigns_opaque_id(students):
    s = students.insert(name="Ana", email="a@x.com", age=20)
    assert isinstance(s.id, str) and len(s.id) == 32
    assert s.course_ids == ()
    assert students.get(s.id) == s


def test_get_unknown_returns_none(students):
    assert students.get("missing") is None


def test_duplicate_email_is_validation_failure(students):
    students.insert(name="Ana", email="a@x.com", age=20)
    with pytest.raises(ValidationFailure):
        students.insert(name="Ana 2", email="a@x.com", age=21)


def test_credits_out_of_range_rejected_by_store(courses):
    with pytest.raises(ValidationFailure):
        courses.insert(title="Too big", code="X1", credits=7, instructor="T")


def test_name_contains_case_insensitive(students):
    _seed_students(students)
    rows = students.find(build_student_plan(StudentFilter(name_contains="AN")))
    assert _names(rows) == ["Ana Lopez", "Diana"]


def test_min_age_only_has_no_upper_bound(students):
    _seed_students(students)
    rows = students.find(build_student_plan(StudentFilter(min_age=18)))
    assert _names(rows) == ["Ana Lopez", "Diana"]


def test_zero_min_age_includes_zero(students):
    """minAge=0 - граница, и студент возраста 0 попадает в выборку"""
    _seed_students(students)
    rows = students.find(build_student_plan(StudentFilter(max_age=0)))
    assert _names(rows) == ["Bob"]
    rows = students.find(build_student_plan(StudentFilter(min_age=0)))
    assert len(rows) == 3


def test_code_prefix_anchored_at_start(courses):
    courses.insert(title="Algorithms", code="CS101", credits=4, instructor="Knuth")
    courses.insert(title="Discrete math", code="MATHCS", credits=3, instructor="Erdos")
    rows = courses.find(build_course_plan(CourseFilter(code_prefix="cs")))
    assert [c.code for c in rows] == ["CS101"]


def test_wildcards_in_filter_are_literal(courses):
    courses.insert(title="100% Python", code="PY1", credits=2, instructor="Guido")
    courses.insert(title="Python basics", code="PY2", credits=2, instructor="Guido")
    rows = courses.find(build_course_plan(CourseFilter(title_contains="%")))
    assert [c.code for c in rows] == ["PY1"]


def test_sort_and_pagination(students):
    for i in range(60):
        students.insert(name=f"S{i:02d}", email=f"s{i}@x.com", age=i)
    assert len(students.find(build_student_plan())) == 10
    assert len(students.find(build_student_plan(options=ListOptions(limit=1000)))) == 50

    rows = students.find(build_student_plan(options=ListOptions(sort_by="age", sort_order="DESC", limit=3)))
    assert [r.age for r in rows] == [59, 58, 57]

    rows = students.find(build_student_plan(options=ListOptions(sort_by="age", limit=2, offset=5)))
    assert [r.age for r in rows] == [5, 6]


def test_update_applies_only_given_changes(students):
    s = students.insert(name="Ana", email="a@x.com", age=20)
    updated = students.update(s.id, {"major": "CS"})
    assert (updated.name, updated.email, updated.age, updated.major) == ("Ana", "a@x.com", 20, "CS")
    assert students.update("missing", {"major": "CS"}) is None


def test_add_and_remove_reference_are_set_operations(students):
    s = students.insert(name="Ana", email="a@x.com", age=20)
    assert students.add_reference(s.id, "c1")
    assert students.add_reference(s.id, "c1")
    assert students.add_reference(s.id, "c2")
    assert students.get(s.id).course_ids == ("c1", "c2")

    assert students.remove_reference(s.id, "c1")
    assert students.remove_reference(s.id, "c1")
    assert students.get(s.id).course_ids == ("c2",)

    assert students.add_reference("missing", "c1") is False
    assert students.remove_reference("missing", "c1") is False


def test_pull_reference_from_every_record(courses):
    a = courses.insert(title="A", code="A1", credits=1, instructor="T")
    b = courses.insert(title="B", code="B1", credits=1, instructor="T")
    c = courses.insert(title="C", code="C1", credits=1, instructor="T")
    courses.add_reference(a.id, "s1")
    courses.add_reference(a.id, "s2")
    courses.add_reference(b.id, "s1")
    courses.add_reference(c.id, "s22")

    assert courses.pull_reference("s1") == 2
    assert courses.get(a.id).student_ids == ("s2",)
    assert courses.get(b.id).student_ids == ()
    assert courses.get(c.id).student_ids == ("s22",)


def test_find_many_keeps_order_and_skips_missing(courses):
    a = courses.insert(title="A", code="A1", credits=1, instructor="T")
    b = courses.insert(title="B", code="B1", credits=1, instructor="T")
    found = courses.find_many([b.id, "gone", a.id])
    assert [c.id for c in found] == [b.id, a.id]
    assert courses.find_many([]) == []


def test_delete(courses):
    a = courses.insert(title="A", code="A1", credits=1, instructor="T")
    assert courses.delete(a.id) is True
    assert courses.delete(a.id) is False
    assert courses.get(a.id) is None


def test_driver_failure_is_transient_and_session_recovers(students, db):
    """Ошибка драйвера -> TransientStoreFailure, откат, сессия остаётся рабочей"""
    _seed_students(students)
    locked = OperationalError("SELECT", {}, Exception("database is locked"))
    with mock.patch.object(db, "execute", side_effect=locked), \
            mock.patch.object(db, "rollback", wraps=db.rollback) as rollback:
        with pytest.raises(TransientStoreFailure):
            students.find(build_student_plan())
    rollback.assert_called_once()

    assert _names(students.find(build_student_plan())) == ["Ana Lopez", "Bob", "Diana"]
    students.insert(name="Eve", email="eve@x.com", age=22)
    assert len(students.find(build_student_plan())) == 4
