from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
import structlog

from ..config import settings
from ..domain.entities import Identity

logger = structlog.get_logger()

pwd = CryptContext(
    schemes=["bcrypt_sha256"],
    deprecated="auto",
    bcrypt_sha256__truncate_error=False,
)

class PasswordHasher:
    def hash(self, plain: str) -> str: return pwd.hash(plain)
    def verify(self, plain: str, hashed: str) -> bool: return pwd.verify(plain, hashed)

def create_access_token(subject_id: str, email: str, minutes: int | None = None) -> str:
    minutes = minutes if minutes is not None else settings.ACCESS_TOKEN_TTL_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": subject_id, "email": email, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Identity:
    """Возвращает Identity из токена или кидает JWTError."""
    payload = jwt.decode(
        token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM],
        options={"require_exp": True},
    )
    sub = payload.get("sub")
    email = payload.get("email")
    if not sub or not email:
        raise JWTError("Missing subject claims")
    return Identity(subject_id=sub, email=email)


def build_identity(authorization: str | None) -> Identity | None:
    """Личность из заголовка Authorization; любая ошибка -> аноним, без исключений."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    try:
        return decode_token(token)
    except JWTError as e:
        logger.debug("token_rejected", reason=str(e))
        return None
