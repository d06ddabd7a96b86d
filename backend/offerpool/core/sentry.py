from __future__ import annotations

from typing import Any

from offerpool.core.config import settings
from offerpool.core.logging_config import request_id_ctx_var


def _attach_request_id(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    request_id = request_id_ctx_var.get()
    if request_id:
        event.setdefault("tags", {})["request_id"] = request_id
    return event


def init_sentry() -> None:
    """Enable error reporting when ``SENTRY_DSN`` is set; a no-op otherwise."""
    dsn = (settings.sentry_dsn or "").strip()
    if not dsn:
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        environment=settings.environment,
        release=f"offerpool@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=[FastApiIntegration(), SqlalchemyIntegration()],
        before_send=_attach_request_id,
        send_default_pii=False,
    )
