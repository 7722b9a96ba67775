from dataclasses import dataclass, field


@dataclass(frozen=True)
class User:
    id: str | None
    email: str


@dataclass(frozen=True)
class Identity:
    """Проверенная личность из bearer-токена (sub + email)."""
    subject_id: str
    email: str


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    email: str
    age: int
    major: str | None = None
    course_ids: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Course:
    id: str
    title: str
    code: str
    credits: int
    instructor: str
    student_ids: tuple[str, ...] = field(default_factory=tuple)
