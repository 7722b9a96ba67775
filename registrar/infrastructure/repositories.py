from sqlalchemy import String, cast, delete, select
from sqlalchemy.orm import Session

from .db import commit_or_raise, store_errors
from .metrics import db_queries_total
from .models import CourseORM, StudentORM, UserORM
from ..application.query_plan import QueryPlan
from ..domain.entities import Course, Student, User


def student_to_domain(s: StudentORM) -> Student:
    return Student(id=s.id, name=s.name, email=s.email, age=s.age, major=s.major,
                   course_ids=tuple(s.course_ids or ()))

def course_to_domain(c: CourseORM) -> Course:
    return Course(id=c.id, title=c.title, code=c.code, credits=c.credits,
                  instructor=c.instructor, student_ids=tuple(c.student_ids or ()))

def user_to_domain(u: UserORM) -> User:
    return User(id=u.id, email=u.email)


def apply_plan(stmt, model, plan: QueryPlan):
    for p in plan.predicates:
        col = getattr(model, p.field)
        if p.op == "eq":
            stmt = stmt.where(col == p.value)
        elif p.op == "icontains":
            stmt = stmt.where(col.icontains(p.value, autoescape=True))
        elif p.op == "istartswith":
            stmt = stmt.where(col.istartswith(p.value, autoescape=True))
        elif p.op == "gte":
            stmt = stmt.where(col >= p.value)
        elif p.op == "lte":
            stmt = stmt.where(col <= p.value)
        else:
            raise ValueError(f"Unknown predicate op {p.op!r}")
    if plan.sort is not None:
        col = getattr(model, plan.sort.field)
        stmt = stmt.order_by(col.desc() if plan.sort.descending else col.asc())
    return stmt.offset(plan.offset).limit(plan.limit)


class _ReferenceRepository:
    """Записи со списком ссылок на другую сторону связи многие-ко-многим.

    Каждая операция над ссылками меняет ровно одну запись и коммитится отдельно.
    """
    model = None
    ref_attr = ""
    entity = ""

    def __init__(self, db: Session): self.db = db

    def _to_domain(self, row): raise NotImplementedError

    def _locked(self, id: str):
        stmt = select(self.model).where(self.model.id == id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get(self, id: str):
        db_queries_total.labels(entity=self.entity).inc()
        with store_errors(self.db):
            row = self.db.get(self.model, id)
        return self._to_domain(row) if row else None

    def find(self, plan: QueryPlan) -> list:
        db_queries_total.labels(entity=self.entity).inc()
        with store_errors(self.db):
            rows = self.db.execute(apply_plan(select(self.model), self.model, plan)).scalars().all()
        return [self._to_domain(r) for r in rows]

    def find_many(self, ids) -> list:
        """Пакетная подгрузка по списку id; порядок сохраняется, пропавшие id пропускаются."""
        ids = list(ids)
        if not ids:
            return []
        db_queries_total.labels(entity=self.entity).inc()
        with store_errors(self.db):
            rows = self.db.execute(select(self.model).where(self.model.id.in_(ids))).scalars().all()
        by_id = {r.id: r for r in rows}
        return [self._to_domain(by_id[i]) for i in ids if i in by_id]

    def insert(self, **fields):
        row = self.model(**fields)
        self.db.add(row)
        commit_or_raise(self.db)
        self.db.refresh(row)
        return self._to_domain(row)

    def update(self, id: str, changes: dict):
        with store_errors(self.db):
            row = self._locked(id)
        if row is None:
            self.db.rollback()
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        commit_or_raise(self.db)
        self.db.refresh(row)
        return self._to_domain(row)

    def delete(self, id: str) -> bool:
        with store_errors(self.db):
            result = self.db.execute(delete(self.model).where(self.model.id == id))
        commit_or_raise(self.db)
        return result.rowcount > 0

    def add_reference(self, id: str, ref_id: str) -> bool:
        """Set-add; False если записи нет (ничего не записано)."""
        with store_errors(self.db):
            row = self._locked(id)
        if row is None:
            self.db.rollback()
            return False
        refs = list(getattr(row, self.ref_attr) or ())
        if ref_id not in refs:
            setattr(row, self.ref_attr, refs + [ref_id])
        commit_or_raise(self.db)
        return True

    def remove_reference(self, id: str, ref_id: str) -> bool:
        with store_errors(self.db):
            row = self._locked(id)
        if row is None:
            self.db.rollback()
            return False
        refs = list(getattr(row, self.ref_attr) or ())
        if ref_id in refs:
            setattr(row, self.ref_attr, [r for r in refs if r != ref_id])
        commit_or_raise(self.db)
        return True

    def pull_reference(self, ref_id: str) -> int:
        """Убирает ref_id из списков ссылок всех записей; возвращает число изменённых."""
        column = getattr(self.model, self.ref_attr)
        # грубый отбор по JSON-тексту, точная проверка ниже
        stmt = (select(self.model)
                .where(cast(column, String).contains(f'"{ref_id}"', autoescape=True))
                .with_for_update())
        with store_errors(self.db):
            rows = self.db.execute(stmt).scalars().all()
        changed = 0
        for row in rows:
            refs = list(getattr(row, self.ref_attr) or ())
            if ref_id in refs:
                setattr(row, self.ref_attr, [r for r in refs if r != ref_id])
                changed += 1
        commit_or_raise(self.db)
        return changed


class StudentRepository(_ReferenceRepository):
    model = StudentORM
    ref_attr = "course_ids"
    entity = "student"

    def _to_domain(self, row): return student_to_domain(row)


class CourseRepository(_ReferenceRepository):
    model = CourseORM
    ref_attr = "student_ids"
    entity = "course"

    def _to_domain(self, row): return course_to_domain(row)


class UserRepository:
    def __init__(self, db: Session): self.db = db

    def _row_by_email(self, email: str) -> UserORM | None:
        with store_errors(self.db):
            return self.db.query(UserORM).filter(UserORM.email == email).first()

    def get_by_email(self, email: str) -> User | None:
        row = self._row_by_email(email)
        return user_to_domain(row) if row else None

    def get_with_hash(self, email: str) -> tuple[User, str] | None:
        row = self._row_by_email(email)
        return (user_to_domain(row), row.password_hash) if row else None

    def create(self, email: str, password_hash: str) -> User:
        row = UserORM(email=email, password_hash=password_hash)
        self.db.add(row)
        commit_or_raise(self.db)
        self.db.refresh(row)
        return user_to_domain(row)
