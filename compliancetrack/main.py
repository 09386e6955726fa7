# compliancetrack/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from compliancetrack.core import config
from compliancetrack.core.errors import register_exception_handlers
from compliancetrack.db.session import engine
from compliancetrack.middleware.request_logging import RequestLoggingMiddleware
from compliancetrack.models import Base
from compliancetrack.worker.scheduler import make_scheduler

from compliancetrack.api import health
from compliancetrack.api.v1 import (
    auth,
    comments,
    companies,
    dashboard,
    exports,
    insights,
    obligations,
    reminders,
    team,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("compliancetrack")

# ---------------------------
# CREATE TABLES (dev-only; guard with env)
# ---------------------------
if config.ENABLE_CREATE_ALL:
    Base.metadata.create_all(bind=engine)

# ---------------------------
# APP
# ---------------------------
app = FastAPI(title="ComplianceTrack")

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api/v1", tags=["auth"])
app.include_router(companies.router, prefix="/api/v1", tags=["companies"])
app.include_router(team.router, prefix="/api/v1", tags=["team"])
app.include_router(obligations.router, prefix="/api/v1", tags=["obligations"])
app.include_router(comments.router, prefix="/api/v1", tags=["comments"])
app.include_router(reminders.router, prefix="/api/v1", tags=["reminders"])
app.include_router(dashboard.router, prefix="/api/v1", tags=["dashboard"])
app.include_router(exports.router, prefix="/api/v1", tags=["exports"])
app.include_router(insights.router, prefix="/api/v1", tags=["insights"])


# ---------------------------
# Scheduler (daily deadline e-mails)
# ---------------------------
@app.on_event("startup")
def _start_scheduler():
    app.state.scheduler = None
    if not config.ENABLE_SCHEDULER:
        return
    try:
        app.state.scheduler = make_scheduler()
        app.state.scheduler.start()
        log.info("Scheduler started (%02d:%02d daily)", config.APP_SCHEDULER_HOUR, config.APP_SCHEDULER_MINUTE)
    except Exception:
        # the API keeps serving without the background job
        log.exception("Scheduler failed to start")
        app.state.scheduler = None


@app.on_event("shutdown")
def _stop_scheduler():
    sched = getattr(app.state, "scheduler", None)
    if sched:
        sched.shutdown(wait=False)


# ---------------------------
# OpenAPI
# ---------------------------
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="ComplianceTrack",
        version="1.0.0",
        description="Compliance obligation tracking API",
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
    openapi_schema["components"]["securitySchemes"]["OAuth2PasswordBearer"] = {
        "type": "oauth2",
        "flows": {"password": {"tokenUrl": "/api/v1/login", "scopes": {}}},
    }
    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi
