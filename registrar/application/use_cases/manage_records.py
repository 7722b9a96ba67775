from pydantic import BaseModel, ValidationError

from ...domain.entities import Course, Student
from ...domain.errors import NotFound, ValidationFailure
from ..dto import CourseCreate, CoursePatch, StudentCreate, StudentPatch


def validated(model: type[BaseModel], data: dict):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationFailure(problems) from e


class IRecordRepository:
    def get(self, id: str): ...
    def insert(self, **fields): ...
    def update(self, id: str, changes: dict): ...


class AddStudent:
    def __init__(self, students: IRecordRepository):
        self.students = students

    def execute(self, data: dict) -> Student:
        payload = validated(StudentCreate, data)
        return self.students.insert(**payload.model_dump())


class UpdateStudent:
    def __init__(self, students: IRecordRepository):
        self.students = students

    def execute(self, id: str, data: dict) -> Student:
        """data содержит только переданные клиентом поля."""
        patch = validated(StudentPatch, data)
        changes = patch.changes()
        student = self.students.update(id, changes) if changes else self.students.get(id)
        if student is None:
            raise NotFound(f"Student {id} not found")
        return student


class AddCourse:
    def __init__(self, courses: IRecordRepository):
        self.courses = courses

    def execute(self, data: dict) -> Course:
        payload = validated(CourseCreate, data)
        return self.courses.insert(**payload.model_dump())


class UpdateCourse:
    def __init__(self, courses: IRecordRepository):
        self.courses = courses

    def execute(self, id: str, data: dict) -> Course:
        patch = validated(CoursePatch, data)
        changes = patch.changes()
        course = self.courses.update(id, changes) if changes else self.courses.get(id)
        if course is None:
            raise NotFound(f"Course {id} not found")
        return course
