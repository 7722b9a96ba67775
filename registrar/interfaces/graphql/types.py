"""
GraphQL output types
"""

import asyncio

import strawberry

from ...domain import entities
from ...infrastructure.repositories import CourseRepository, StudentRepository
from .context import in_store


@strawberry.type
class User:
    id: strawberry.ID
    email: str

    @classmethod
    def from_entity(cls, user: entities.User) -> "User":
        return cls(id=strawberry.ID(user.id), email=user.email)


@strawberry.type
class AuthPayload:
    token: str
    user: User


@strawberry.type
class Student:
    id: strawberry.ID
    name: str
    email: str
    age: int
    major: str | None
    course_ids: strawberry.Private[tuple[str, ...]]
    populated: strawberry.Private[asyncio.Future | None] = None

    @classmethod
    def from_entity(cls, s: entities.Student) -> "Student":
        return cls(id=strawberry.ID(s.id), name=s.name, email=s.email, age=s.age,
                   major=s.major, course_ids=s.course_ids)

    async def _populate(self, info: strawberry.Info) -> list["Course"]:
        # вторая фаза чтения: одна пакетная выборка на объект, общая для courses и coursesCount
        if self.populated is None:
            repo = CourseRepository(info.context["db"])
            self.populated = asyncio.ensure_future(in_store(info, repo.find_many, self.course_ids))
        return [Course.from_entity(c) for c in await self.populated]

    @strawberry.field
    async def courses(self, info: strawberry.Info) -> list["Course"]:
        return await self._populate(info)

    @strawberry.field
    async def courses_count(self, info: strawberry.Info) -> int:
        """Число курсов в том же списке, что отдаёт поле courses."""
        return len(await self._populate(info))


@strawberry.type
class Course:
    id: strawberry.ID
    title: str
    code: str
    credits: int
    instructor: str
    student_ids: strawberry.Private[tuple[str, ...]]
    populated: strawberry.Private[asyncio.Future | None] = None

    @classmethod
    def from_entity(cls, c: entities.Course) -> "Course":
        return cls(id=strawberry.ID(c.id), title=c.title, code=c.code, credits=c.credits,
                   instructor=c.instructor, student_ids=c.student_ids)

    async def _populate(self, info: strawberry.Info) -> list[Student]:
        if self.populated is None:
            repo = StudentRepository(info.context["db"])
            self.populated = asyncio.ensure_future(in_store(info, repo.find_many, self.student_ids))
        return [Student.from_entity(s) for s in await self.populated]

    @strawberry.field
    async def students(self, info: strawberry.Info) -> list[Student]:
        return await self._populate(info)

    @strawberry.field
    async def students_count(self, info: strawberry.Info) -> int:
        return len(await self._populate(info))
