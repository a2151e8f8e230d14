"""FastAPI entrypoint for the Pick&Play rental ordering API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pickplay.api.v1.api import api_router
from pickplay.core.config import settings
from pickplay.core.errors import DomainError
from pickplay.core.logging import configure_logging
from pickplay.db.base import Base
from pickplay.db.seed import ensure_root_user, ensure_seed_data
from pickplay.db.session import SessionLocal, engine
from pickplay.middleware.audit import AuditInterceptor, AuditMiddleware
from pickplay.services.audit_service import AuditRecorder

logger = logging.getLogger(__name__)

audit_recorder = AuditRecorder()
audit_interceptor = AuditInterceptor(audit_recorder)

app = FastAPI(title=settings.app_name)
app.state.audit_recorder = audit_recorder
app.add_middleware(
    AuditMiddleware,
    interceptor=audit_interceptor,
    path_prefixes=settings.audited_path_prefixes,
)
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.on_event("startup")
def startup() -> None:
    configure_logging()
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        try:
            ensure_seed_data(session)
            root_present = ensure_root_user(session)
            logger.info("[BOOTSTRAP] root account present: %s", "yes" if root_present else "no")
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
