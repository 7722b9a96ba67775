"""
GraphQL schema: root types, error codes and the FastAPI router
"""

from typing import Any

import strawberry
import structlog
from graphql import GraphQLError
from strawberry.extensions import SchemaExtension
from strawberry.fastapi import GraphQLRouter

from ...config import settings
from ...domain.errors import RegistrarError
from . import resolvers
from .context import get_context
from .inputs import (
    CourseFilterInput, CourseUpdateInput, ListOptionsInput, StudentFilterInput,
    StudentUpdateInput,
)
from .types import AuthPayload, Course, Student

logger = structlog.get_logger()


@strawberry.type
class Query:
    @strawberry.field
    async def get_all_students(self, info: strawberry.Info, filter: StudentFilterInput | None = None,
                               options: ListOptionsInput | None = None) -> list[Student]:
        return await resolvers.resolve_students(info, filter, options)

    @strawberry.field
    async def get_student(self, info: strawberry.Info, id: strawberry.ID) -> Student | None:
        return await resolvers.resolve_student(info, id)

    @strawberry.field
    async def get_all_courses(self, info: strawberry.Info, filter: CourseFilterInput | None = None,
                              options: ListOptionsInput | None = None) -> list[Course]:
        return await resolvers.resolve_courses(info, filter, options)

    @strawberry.field
    async def get_course(self, info: strawberry.Info, id: strawberry.ID) -> Course | None:
        return await resolvers.resolve_course(info, id)


@strawberry.type
class Mutation:
    # Auth
    @strawberry.mutation
    async def signup(self, info: strawberry.Info, email: str, password: str) -> AuthPayload:
        return await resolvers.signup(info, email, password)

    @strawberry.mutation
    async def login(self, info: strawberry.Info, email: str, password: str) -> AuthPayload:
        return await resolvers.login(info, email, password)

    # Student
    @strawberry.mutation
    async def add_student(self, info: strawberry.Info, name: str, email: str, age: int,
                          major: str | None = None) -> Student:
        return await resolvers.add_student(info, name, email, age, major)

    @strawberry.mutation
    async def update_student(self, info: strawberry.Info, id: strawberry.ID,
                             input: StudentUpdateInput) -> Student:
        return await resolvers.update_student(info, id, input)

    @strawberry.mutation
    async def delete_student(self, info: strawberry.Info, id: strawberry.ID) -> bool:
        return await resolvers.delete_student(info, id)

    # Course
    @strawberry.mutation
    async def add_course(self, info: strawberry.Info, title: str, code: str, credits: int,
                         instructor: str) -> Course:
        return await resolvers.add_course(info, title, code, credits, instructor)

    @strawberry.mutation
    async def update_course(self, info: strawberry.Info, id: strawberry.ID,
                            input: CourseUpdateInput) -> Course:
        return await resolvers.update_course(info, id, input)

    @strawberry.mutation
    async def delete_course(self, info: strawberry.Info, id: strawberry.ID) -> bool:
        return await resolvers.delete_course(info, id)

    # Enrollment
    @strawberry.mutation
    async def enroll_student(self, info: strawberry.Info, student_id: strawberry.ID,
                             course_id: strawberry.ID) -> Student:
        return await resolvers.enroll_student(info, student_id, course_id)

    @strawberry.mutation
    async def unenroll_student(self, info: strawberry.Info, student_id: strawberry.ID,
                               course_id: strawberry.ID) -> Student:
        return await resolvers.unenroll_student(info, student_id, course_id)


class ErrorCodes(SchemaExtension):
    """Проставляет extensions.code для доменных ошибок."""

    def on_operation(self):
        yield
        result = self.execution_context.result
        errors = getattr(result, "errors", None)
        if errors:
            result.errors = [self._with_code(e) for e in errors]

    @staticmethod
    def _with_code(error: GraphQLError) -> GraphQLError:
        original = error.original_error
        if not isinstance(original, RegistrarError):
            return error
        return GraphQLError(
            error.message,
            nodes=error.nodes,
            source=error.source,
            positions=error.positions,
            path=error.path,
            original_error=original,
            extensions={**(error.extensions or {}), "code": original.code},
        )


class RegistrarSchema(strawberry.Schema):
    def process_errors(self, errors, execution_context=None) -> None:
        for error in errors:
            original = error.original_error
            if isinstance(original, RegistrarError):
                logger.info("graphql_error", code=original.code, message=error.message,
                            path=error.path)
            elif original is None:
                logger.warning("graphql_request_error", message=error.message)
            else:
                logger.error("graphql_unhandled_error", message=error.message,
                             path=error.path, exc_info=original)


schema = RegistrarSchema(query=Query, mutation=Mutation, extensions=[ErrorCodes])


def create_graphql_router() -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI."""
    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if settings.GRAPHIQL else None,
        context_getter=get_context,
    )
