"""Audit interceptor stage for mutating catalog requests.

The middleware forwards every message untouched and keeps a copy of the
response status and body. Once the downstream app has returned, the response
is already on the wire; only then is a ``CompletedExchange`` built from plain
values and handed to ``AuditInterceptor``. Whatever happens during auditing
is logged and dropped.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pickplay.db import session as db_session
from pickplay.services.audit_service import AuditRecorder

logger = logging.getLogger(__name__)

ACTION_BY_METHOD: dict[str, str] = {
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
}
MAX_CAPTURED_BODY = 64 * 1024
_TRAILING_ID = re.compile(r"/(\d+)/?$")


class AuditOutcome(str, Enum):
    AUDITED = "audited"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class CompletedExchange:
    """A finished request/response pair reduced to plain values."""

    method: str
    path: str
    status_code: int
    body: bytes = b""
    path_params: Mapping[str, Any] = field(default_factory=dict)
    actor_id: int | None = None


def action_for_method(method: str) -> str | None:
    return ACTION_BY_METHOD.get(method.upper())


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def target_from_path(path_params: Mapping[str, Any], path: str) -> int | None:
    for key, value in path_params.items():
        if key == "id" or key.endswith("_id"):
            parsed = _as_int(value)
            if parsed is not None:
                return parsed
    match = _TRAILING_ID.search(path)
    return int(match.group(1)) if match else None


def target_from_body(body: bytes, entity_key: str) -> int | None:
    if not body:
        return None
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    candidate = payload.get("id")
    if candidate is None and isinstance(payload.get(entity_key), dict):
        candidate = payload[entity_key].get("id")
    return _as_int(candidate)


class AuditInterceptor:
    """Decides whether a completed exchange is audited, and records it if so."""

    def __init__(
        self,
        recorder: AuditRecorder,
        *,
        session_factory: Callable[[], Session] | None = None,
        entity_key: str = "product",
    ) -> None:
        self.recorder = recorder
        self.session_factory = session_factory or db_session.open_session
        self.entity_key = entity_key

    def resolve_target(self, exchange: CompletedExchange) -> int | None:
        return target_from_path(exchange.path_params, exchange.path) or target_from_body(exchange.body, self.entity_key)

    def handle(self, exchange: CompletedExchange) -> AuditOutcome:
        action = action_for_method(exchange.method)
        if action is None:
            return AuditOutcome.SKIPPED
        if exchange.actor_id is None:
            return AuditOutcome.SKIPPED
        if not 200 <= exchange.status_code < 300:
            return AuditOutcome.SKIPPED

        try:
            target_id = self.resolve_target(exchange)
            if target_id is None:
                logger.info("[AUDIT] No target id for %s %s; skipping", exchange.method, exchange.path)
                return AuditOutcome.SKIPPED
            with self.session_factory() as db:
                entry = self.recorder.record(db, exchange.actor_id, action, target_id)
        except Exception:
            logger.exception("[AUDIT] Interceptor failed for %s %s", exchange.method, exchange.path)
            return AuditOutcome.FAILED
        return AuditOutcome.AUDITED if entry is not None else AuditOutcome.FAILED


class AuditMiddleware:
    """ASGI stage that feeds finished catalog mutations to ``AuditInterceptor``."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        interceptor: AuditInterceptor,
        path_prefixes: tuple[str, ...] = ("/api/v1/products",),
    ) -> None:
        self.app = app
        self.interceptor = interceptor
        self.path_prefixes = path_prefixes

    def _applies(self, scope: Scope) -> bool:
        if scope["type"] != "http":
            return False
        if action_for_method(scope.get("method", "")) is None:
            return False
        path: str = scope.get("path", "")
        return any(path.startswith(prefix) for prefix in self.path_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if not self._applies(scope):
            await self.app(scope, receive, send)
            return

        status_code = 500
        chunks: list[bytes] = []
        captured = 0

        async def capture_send(message: Message) -> None:
            nonlocal status_code, captured
            if message["type"] == "http.response.start":
                status_code = message["status"]
            elif message["type"] == "http.response.body":
                body = message.get("body", b"")
                if captured < MAX_CAPTURED_BODY:
                    chunks.append(body)
                captured += len(body)
            await send(message)

        await self.app(scope, receive, capture_send)

        state = scope.get("state") or {}
        exchange = CompletedExchange(
            method=scope["method"],
            path=scope["path"],
            status_code=status_code,
            body=b"".join(chunks) if captured <= MAX_CAPTURED_BODY else b"",
            path_params=dict(scope.get("path_params") or {}),
            actor_id=state.get("actor_id"),
        )
        outcome = await run_in_threadpool(self.interceptor.handle, exchange)
        logger.debug("[AUDIT] %s %s -> %s", exchange.method, exchange.path, outcome.value)
