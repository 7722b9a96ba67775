from dataclasses import dataclass

from pydantic import BaseModel, Field, field_validator


@dataclass
class StudentFilter:
    major: str | None = None
    name_contains: str | None = None
    min_age: int | None = None
    max_age: int | None = None


@dataclass
class CourseFilter:
    code_prefix: str | None = None
    title_contains: str | None = None
    instructor: str | None = None
    min_credits: int | None = None
    max_credits: int | None = None


@dataclass
class ListOptions:
    limit: int | None = None
    offset: int | None = None
    sort_by: str | None = None
    sort_order: str | None = None


class StudentCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    age: int = Field(ge=0)
    major: str | None = None


class CourseCreate(BaseModel):
    title: str = Field(min_length=1)
    code: str = Field(min_length=1)
    credits: int = Field(ge=1, le=6)
    instructor: str = Field(min_length=1)


class StudentPatch(BaseModel):
    """Частичное обновление: применяются только поля из model_fields_set."""
    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    age: int | None = Field(default=None, ge=0)
    major: str | None = None

    @field_validator("name", "email", "age")
    @classmethod
    def not_null(cls, v):
        # валидатор срабатывает только для явно переданных полей
        if v is None:
            raise ValueError("field may not be null")
        return v

    def changes(self) -> dict:
        return self.model_dump(include=self.model_fields_set)


class CoursePatch(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    code: str | None = Field(default=None, min_length=1)
    credits: int | None = Field(default=None, ge=1, le=6)
    instructor: str | None = Field(default=None, min_length=1)

    @field_validator("title", "code", "credits", "instructor")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("field may not be null")
        return v

    def changes(self) -> dict:
        return self.model_dump(include=self.model_fields_set)
