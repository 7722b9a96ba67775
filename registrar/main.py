import logging
import time

import structlog
from fastapi import FastAPI, Request
from sqlalchemy import text

from .config import settings
from .infrastructure.db import engine
from .infrastructure.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_endpoint,
)
from .infrastructure.models import Base
from .interfaces.graphql.schema import create_graphql_router

VERSION = "0.1.0"


def configure_logging(level_name: str) -> None:
    """JSON-логи в stdout с фильтром по уровню из настроек."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging(settings.LOG_LEVEL)
logger = structlog.get_logger()

app = FastAPI(title="Registrar Service", version=VERSION)


# Метрики и журнал по каждому HTTP-запросу
@app.middleware("http")
async def observe_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)

    duration = time.perf_counter() - started
    method, path, status_code = request.method, request.url.path, response.status_code
    http_requests_total.labels(method=method, endpoint=path, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)
    logger.info("http_request", method=method, path=path, status_code=status_code,
                duration_ms=round(duration * 1000, 2))
    return response


@app.on_event("startup")
def prepare_store():
    """Создаёт таблицы и проверяет, что хранилище отвечает."""
    logger.info("registrar_starting", version=VERSION, graphiql=settings.GRAPHIQL)
    Base.metadata.create_all(bind=engine)
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("store_ready")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return metrics_endpoint()


app.include_router(create_graphql_router())


def run():
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
