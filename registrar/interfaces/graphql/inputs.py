"""
GraphQL input types
"""

import dataclasses

import strawberry

from ...application import dto


@strawberry.input(name="StudentUpdateInput")
class StudentUpdateInput:
    # UNSET = поле не передано; None = передан явный null
    name: str | None = strawberry.UNSET
    email: str | None = strawberry.UNSET
    age: int | None = strawberry.UNSET
    major: str | None = strawberry.UNSET


@strawberry.input(name="CourseUpdateInput")
class CourseUpdateInput:
    title: str | None = strawberry.UNSET
    code: str | None = strawberry.UNSET
    credits: int | None = strawberry.UNSET
    instructor: str | None = strawberry.UNSET


@strawberry.input(name="ListOptions")
class ListOptionsInput:
    limit: int | None = None
    offset: int | None = None
    sort_by: str | None = None
    sort_order: str | None = None


@strawberry.input(name="StudentFilter")
class StudentFilterInput:
    major: str | None = None
    name_contains: str | None = None
    min_age: int | None = None
    max_age: int | None = None


@strawberry.input(name="CourseFilter")
class CourseFilterInput:
    code_prefix: str | None = None
    title_contains: str | None = None
    instructor: str | None = None
    min_credits: int | None = None
    max_credits: int | None = None


def supplied_fields(value) -> dict:
    """Только поля, которые клиент действительно передал."""
    return {
        f.name: getattr(value, f.name)
        for f in dataclasses.fields(value)
        if getattr(value, f.name) is not strawberry.UNSET
    }


def to_dto(dto_cls, value):
    if value is None:
        return None
    return dto_cls(**{f.name: getattr(value, f.name) for f in dataclasses.fields(dto_cls)})


def student_filter(value: StudentFilterInput | None) -> dto.StudentFilter | None:
    return to_dto(dto.StudentFilter, value)


def course_filter(value: CourseFilterInput | None) -> dto.CourseFilter | None:
    return to_dto(dto.CourseFilter, value)


def list_options(value: ListOptionsInput | None) -> dto.ListOptions | None:
    return to_dto(dto.ListOptions, value)
