"""SafeSignal FastAPI application."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from safesignal.api import admin, alerts, auth, contacts, health, notifications, ws
from safesignal.core.config import settings
from safesignal.core.errors import register_error_handlers

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
)

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(contacts.router)
app.include_router(alerts.router)
app.include_router(notifications.router)
app.include_router(admin.router)
app.include_router(ws.router)
