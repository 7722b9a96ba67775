"""Согласование зеркальных списков ссылок студент <-> курс.

Общей транзакции на две записи нет: каждая сторона пишется отдельным
коммитом (set-add / set-remove). Если вторая запись не прошла, первая
остаётся применённой; повтор той же операции идемпотентен и выравнивает
обе стороны. Компенсирующего отката нет.
"""
import structlog

from ...domain.entities import Student
from ...domain.errors import NotFound
from ...infrastructure.metrics import enrollment_partial_writes_total

logger = structlog.get_logger()


class IReferenceRepository:
    def get(self, id: str): ...
    def delete(self, id: str) -> bool: ...
    def add_reference(self, id: str, ref_id: str) -> bool: ...
    def remove_reference(self, id: str, ref_id: str) -> bool: ...
    def pull_reference(self, ref_id: str) -> int: ...


def _second_write(operation: str, write, missing_is_partial: bool, **ids) -> None:
    try:
        applied = write()
    except Exception:
        logger.warning("enrollment_partially_applied", operation=operation, **ids)
        enrollment_partial_writes_total.labels(operation=operation).inc()
        raise
    if not applied and missing_is_partial:
        # вторую сторону удалили между проверкой и записью
        logger.warning("enrollment_partially_applied", operation=operation,
                       reason="counterpart_missing", **ids)
        enrollment_partial_writes_total.labels(operation=operation).inc()


class _EnrollmentUseCase:
    def __init__(self, students: IReferenceRepository, courses: IReferenceRepository):
        self.students = students
        self.courses = courses

    def _refreshed(self, student_id: str) -> Student:
        student = self.students.get(student_id)
        if student is None:
            raise NotFound(f"Student {student_id} not found")
        return student


class EnrollStudent(_EnrollmentUseCase):
    def execute(self, student_id: str, course_id: str) -> Student:
        if self.courses.get(course_id) is None:
            raise NotFound(f"Course {course_id} not found")
        if not self.students.add_reference(student_id, course_id):
            raise NotFound(f"Student {student_id} not found")
        _second_write(
            "enroll",
            lambda: self.courses.add_reference(course_id, student_id),
            missing_is_partial=True,
            student_id=student_id, course_id=course_id,
        )
        logger.info("student_enrolled", student_id=student_id, course_id=course_id)
        return self._refreshed(student_id)


class UnenrollStudent(_EnrollmentUseCase):
    def execute(self, student_id: str, course_id: str) -> Student:
        if not self.students.remove_reference(student_id, course_id):
            raise NotFound(f"Student {student_id} not found")
        # отсутствующий курс не ошибка: так чистится висячая ссылка
        _second_write(
            "unenroll",
            lambda: self.courses.remove_reference(course_id, student_id),
            missing_is_partial=False,
            student_id=student_id, course_id=course_id,
        )
        logger.info("student_unenrolled", student_id=student_id, course_id=course_id)
        return self._refreshed(student_id)


class DeleteStudent(_EnrollmentUseCase):
    def execute(self, id: str) -> bool:
        pulled = self.courses.pull_reference(id)
        deleted = self.students.delete(id)
        logger.info("student_deleted", student_id=id, deleted=deleted, courses_cleaned=pulled)
        return deleted


class DeleteCourse(_EnrollmentUseCase):
    def execute(self, id: str) -> bool:
        pulled = self.students.pull_reference(id)
        deleted = self.courses.delete(id)
        logger.info("course_deleted", course_id=id, deleted=deleted, students_cleaned=pulled)
        return deleted
