import asyncio
from typing import Any, Callable, TypeVar

import strawberry
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ...domain.entities import Identity
from ...domain.errors import AuthenticationRequired
from ...infrastructure.db import get_db
from ...infrastructure.security import build_identity

T = TypeVar("T")


async def get_context(request: Request, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Контекст резолверов; личность из токена вычисляется один раз на запрос."""
    return {
        "request": request,
        "db": db,
        "db_lock": asyncio.Lock(),
        "identity": build_identity(request.headers.get("authorization")),
    }


async def in_store(info: strawberry.Info, fn: Callable[..., T], *args: Any) -> T:
    """Блокирующая работа с сессией уходит в пул потоков.

    Сессия одна на запрос и не потокобезопасна, поэтому внутри запроса
    вызовы идут по очереди; разные запросы выполняются параллельно.
    """
    async with info.context["db_lock"]:
        return await run_in_threadpool(fn, *args)


def get_identity(info: strawberry.Info) -> Identity | None:
    return info.context.get("identity")


def require_identity(info: strawberry.Info) -> Identity:
    identity = get_identity(info)
    if identity is None:
        raise AuthenticationRequired()
    return identity
