"""
Резолверы корневых полей: связывают GraphQL-аргументы с use case'ами.

Все мутации, кроме signup/login, сначала проверяют личность в контексте
и только потом трогают хранилище. Работа с сессией и bcrypt идёт через
in_store, чтобы не занимать цикл событий.
"""

import strawberry
import structlog

from ...application.query_plan import build_course_plan, build_student_plan
from ...application.use_cases.manage_enrollment import (
    DeleteCourse, DeleteStudent, EnrollStudent, UnenrollStudent,
)
from ...application.use_cases.manage_records import (
    AddCourse, AddStudent, UpdateCourse, UpdateStudent,
)
from ...application.use_cases.register_user import AuthenticateUser, RegisterUser
from ...infrastructure.repositories import CourseRepository, StudentRepository, UserRepository
from ...infrastructure.security import PasswordHasher, create_access_token
from .context import in_store, require_identity
from .inputs import (
    CourseFilterInput, CourseUpdateInput, ListOptionsInput, StudentFilterInput,
    StudentUpdateInput, course_filter, list_options, student_filter, supplied_fields,
)
from .types import AuthPayload, Course, Student, User

logger = structlog.get_logger()


def _repos(info: strawberry.Info) -> tuple[StudentRepository, CourseRepository]:
    db = info.context["db"]
    return StudentRepository(db), CourseRepository(db)


# --- Queries

async def resolve_students(info: strawberry.Info, filter: StudentFilterInput | None,
                           options: ListOptionsInput | None) -> list[Student]:
    plan = build_student_plan(student_filter(filter), list_options(options))
    students, _ = _repos(info)
    return [Student.from_entity(s) for s in await in_store(info, students.find, plan)]


async def resolve_student(info: strawberry.Info, id: str) -> Student | None:
    students, _ = _repos(info)
    found = await in_store(info, students.get, id)
    return Student.from_entity(found) if found else None


async def resolve_courses(info: strawberry.Info, filter: CourseFilterInput | None,
                          options: ListOptionsInput | None) -> list[Course]:
    plan = build_course_plan(course_filter(filter), list_options(options))
    _, courses = _repos(info)
    return [Course.from_entity(c) for c in await in_store(info, courses.find, plan)]


async def resolve_course(info: strawberry.Info, id: str) -> Course | None:
    _, courses = _repos(info)
    found = await in_store(info, courses.get, id)
    return Course.from_entity(found) if found else None


# --- Auth

def _auth_payload(user) -> AuthPayload:
    token = create_access_token(subject_id=user.id, email=user.email)
    return AuthPayload(token=token, user=User.from_entity(user))


async def signup(info: strawberry.Info, email: str, password: str) -> AuthPayload:
    uc = RegisterUser(repo=UserRepository(info.context["db"]), hasher=PasswordHasher())
    user = await in_store(info, uc.execute, email, password)
    logger.info("user_registered", user_id=user.id)
    return _auth_payload(user)


async def login(info: strawberry.Info, email: str, password: str) -> AuthPayload:
    uc = AuthenticateUser(repo=UserRepository(info.context["db"]), hasher=PasswordHasher())
    return _auth_payload(await in_store(info, uc.execute, email, password))


# --- Guarded mutations

async def add_student(info: strawberry.Info, name: str, email: str, age: int,
                      major: str | None) -> Student:
    require_identity(info)
    students, _ = _repos(info)
    created = await in_store(
        info, AddStudent(students).execute,
        {"name": name, "email": email, "age": age, "major": major}
    )
    return Student.from_entity(created)


async def update_student(info: strawberry.Info, id: str, input: StudentUpdateInput) -> Student:
    require_identity(info)
    students, _ = _repos(info)
    updated = await in_store(info, UpdateStudent(students).execute, id, supplied_fields(input))
    return Student.from_entity(updated)


async def delete_student(info: strawberry.Info, id: str) -> bool:
    require_identity(info)
    return await in_store(info, DeleteStudent(*_repos(info)).execute, id)


async def add_course(info: strawberry.Info, title: str, code: str, credits: int,
                     instructor: str) -> Course:
    require_identity(info)
    _, courses = _repos(info)
    created = await in_store(
        info, AddCourse(courses).execute,
        {"title": title, "code": code, "credits": credits, "instructor": instructor}
    )
    return Course.from_entity(created)


async def update_course(info: strawberry.Info, id: str, input: CourseUpdateInput) -> Course:
    require_identity(info)
    _, courses = _repos(info)
    updated = await in_store(info, UpdateCourse(courses).execute, id, supplied_fields(input))
    return Course.from_entity(updated)


async def delete_course(info: strawberry.Info, id: str) -> bool:
    require_identity(info)
    return await in_store(info, DeleteCourse(*_repos(info)).execute, id)


async def enroll_student(info: strawberry.Info, student_id: str, course_id: str) -> Student:
    require_identity(info)
    student = await in_store(info, EnrollStudent(*_repos(info)).execute, student_id, course_id)
    return Student.from_entity(student)


async def unenroll_student(info: strawberry.Info, student_id: str, course_id: str) -> Student:
    require_identity(info)
    student = await in_store(info, UnenrollStudent(*_repos(info)).execute, student_id, course_id)
    return Student.from_entity(student)
