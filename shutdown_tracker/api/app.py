"""
HTTP surface for the shutdown tracker.

This module exposes the lifecycle operations, the derived views used by
the map and list, user administration and the usual health, readiness,
metrics and info endpoints.
"""

import time
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from shutdown_tracker.adapters.auth.header_auth import HeaderAuth
from shutdown_tracker.core.access import can_manage_users, can_mutate, effective_level
from shutdown_tracker.core.errors import (
    GeocodingError,
    RecordNotFoundError,
    ShutdownPermissionError,
    ShutdownValidationError,
)
from shutdown_tracker.core.filters import (
    ALL,
    FilterConfig,
    distinct_regions,
    filter_records,
    has_active_filters,
    map_records,
    summarize,
)
from shutdown_tracker.core.geometry import fit_bounds, is_renderable
from shutdown_tracker.core.inputs import CreateShutdownInput, ShutdownPatch
from shutdown_tracker.core.models import ShutdownRecord, UserProfile
from shutdown_tracker.core.styling import badge_label, classification_tag, style_for
from shutdown_tracker.orchestrators.lifecycle import ShutdownLifecycle
from shutdown_tracker.orchestrators.user_admin import UserAdministration
from shutdown_tracker.ports.storage import UserStorePort
from shutdown_tracker.settings import Settings
from shutdown_tracker.observability.logging_setup import get_logger, with_context
from .schemas import (
    AccessLevelUpdate,
    CurrentUser,
    LogoutResponse,
    ShutdownList,
    ShutdownMap,
    StyledShutdown,
)

log = get_logger("shutdowns.http")


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(settings: Settings,
               lifecycle: ShutdownLifecycle,
               user_admin: UserAdministration,
               users: UserStorePort) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: service settings
        lifecycle: shutdown record controller
        user_admin: access level administration
        users: user profile store backing the auth adapter
    """
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Road and route shutdown tracker"
    )

    start_time = time.time()
    scheme = settings.classification.scheme

    # ------------------------------------------------------------------
    # error mapping

    @app.exception_handler(ShutdownValidationError)
    async def on_validation(request: Request, exc: ShutdownValidationError):
        return _error(422, exc)

    @app.exception_handler(GeocodingError)
    async def on_geocoding(request: Request, exc: GeocodingError):
        return _error(502, exc)

    @app.exception_handler(ShutdownPermissionError)
    async def on_permission(request: Request, exc: ShutdownPermissionError):
        return _error(403, exc)

    @app.exception_handler(RecordNotFoundError)
    async def on_not_found(request: Request, exc: RecordNotFoundError):
        return _error(404, exc)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        with with_context(method=request.method, path=request.url.path):
            return await call_next(request)

    # ------------------------------------------------------------------
    # dependencies

    def get_auth(request: Request) -> HeaderAuth:
        return HeaderAuth(users, request.headers, settings.auth)

    async def current_user(request: Request, auth: HeaderAuth = Depends(get_auth)) -> UserProfile:
        user = await auth.current_user()
        if user is None:
            raise HTTPException(
                status_code=401,
                detail="not signed in",
                headers={"Location": auth.login_url(request.url.path)},
            )
        return user

    def filter_config(search: str = "",
                      status: str = ALL,
                      reason: str = ALL,
                      region: str = ALL,
                      action: str = ALL,
                      mine_only: bool = False) -> FilterConfig:
        return FilterConfig(search=search, status=status, reason=reason,
                            region=region, action=action, mine_only=mine_only)

    def styled(records: List[ShutdownRecord], selected_id: Optional[str]) -> List[StyledShutdown]:
        return [
            StyledShutdown(
                record=r,
                style=style_for(r, selected=r.id == selected_id, scheme=scheme),
                badge=badge_label(classification_tag(r, scheme)),
                renderable=is_renderable(r),
            )
            for r in records
        ]

    # ------------------------------------------------------------------
    # observability

    @app.get("/health")
    async def health():
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/metrics")
    async def metrics():
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "classification_scheme": scheme,
        })

    # ------------------------------------------------------------------
    # shutdowns: derived views

    @app.get("/shutdowns", response_model=ShutdownList)
    async def list_shutdowns(config: FilterConfig = Depends(filter_config),
                             selected_id: Optional[str] = None,
                             user: UserProfile = Depends(current_user)):
        records = await lifecycle.list_records()
        visible = filter_records(records, config, user)
        return ShutdownList(
            items=styled(visible, selected_id),
            summary=summarize(records),
            filtered=has_active_filters(config),
            regions=distinct_regions(records),
        )

    @app.get("/shutdowns/map", response_model=ShutdownMap)
    async def shutdown_map(config: FilterConfig = Depends(filter_config),
                           selected_id: Optional[str] = None,
                           user: UserProfile = Depends(current_user)):
        records = await lifecycle.list_records()
        drawn = [r for r in map_records(filter_records(records, config, user)) if is_renderable(r)]
        return ShutdownMap(items=styled(drawn, selected_id), bounds=fit_bounds(drawn))

    @app.get("/shutdowns/regions", response_model=List[str])
    async def regions(user: UserProfile = Depends(current_user)):
        return distinct_regions(await lifecycle.list_records())

    @app.get("/shutdowns/{record_id}", response_model=ShutdownRecord)
    async def get_shutdown(record_id: str, user: UserProfile = Depends(current_user)):
        return await lifecycle.get(record_id)

    # ------------------------------------------------------------------
    # shutdowns: mutations

    @app.post("/shutdowns", response_model=ShutdownRecord, status_code=201)
    async def create_shutdown(data: CreateShutdownInput, user: UserProfile = Depends(current_user)):
        return await lifecycle.create(data, user)

    @app.patch("/shutdowns/{record_id}", response_model=ShutdownRecord)
    async def update_shutdown(record_id: str, patch: ShutdownPatch,
                              user: UserProfile = Depends(current_user)):
        return await lifecycle.update(record_id, patch, user)

    @app.post("/shutdowns/{record_id}/clear", response_model=ShutdownRecord)
    async def clear_shutdown(record_id: str, user: UserProfile = Depends(current_user)):
        return await lifecycle.clear(record_id, user)

    @app.delete("/shutdowns/{record_id}", status_code=204)
    async def delete_shutdown(record_id: str, confirm: bool = Query(default=False),
                              user: UserProfile = Depends(current_user)):
        await lifecycle.delete(record_id, user, confirmed=confirm)
        return Response(status_code=204)

    # ------------------------------------------------------------------
    # users and auth

    @app.get("/users", response_model=List[UserProfile])
    async def list_users(user: UserProfile = Depends(current_user)):
        return await user_admin.list_users(user)

    @app.patch("/users/{user_id}", response_model=UserProfile)
    async def set_access_level(user_id: str, body: AccessLevelUpdate,
                               user: UserProfile = Depends(current_user)):
        return await user_admin.set_access_level(user, user_id, body.access_level)

    @app.get("/auth/me", response_model=CurrentUser)
    async def me(user: UserProfile = Depends(current_user)):
        level = effective_level(user)
        return CurrentUser(
            user=user,
            effective_level=level,
            can_mutate=can_mutate(level),
            can_manage_users=can_manage_users(user),
        )

    @app.post("/auth/logout", response_model=LogoutResponse)
    async def logout(auth: HeaderAuth = Depends(get_auth)):
        return LogoutResponse(redirect_url=await auth.logout())

    @app.get("/")
    async def root():
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "shutdowns": "/shutdowns",
                "map": "/shutdowns/map",
                "users": "/users",
            }
        })

    log.info("http app created", scheme=scheme)
    return app
