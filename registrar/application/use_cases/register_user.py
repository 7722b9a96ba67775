from ...domain.entities import User
from ...domain.errors import InvalidCredentials, ValidationFailure

class IUserRepository:
    def get_by_email(self, email: str) -> User | None: ...
    def get_with_hash(self, email: str) -> tuple[User, str] | None: ...
    def create(self, email: str, password_hash: str) -> User: ...

class IPasswordHasher:
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...

class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, email: str, password: str) -> User:
        if "@" not in email:
            raise ValidationFailure("Invalid email")
        if not password:
            raise ValidationFailure("Password must not be empty")
        if self.repo.get_by_email(email):
            raise ValidationFailure("Email already registered")
        pwd_hash = self.hasher.hash(password)
        return self.repo.create(email, pwd_hash)

class AuthenticateUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, email: str, password: str) -> User:
        # одинаковая ошибка для "нет такого email" и "неверный пароль"
        found = self.repo.get_with_hash(email)
        if not found or not self.hasher.verify(password, found[1]):
            raise InvalidCredentials("Invalid credentials")
        return found[0]
