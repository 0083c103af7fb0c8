# shutdown_tracker/main.py
import os, asyncio, signal
from datetime import datetime, timezone
import uvicorn
from shutdown_tracker.settings import Settings
from shutdown_tracker.api.app import create_app
from shutdown_tracker.observability.logging_setup import setup_logging, get_logger
from shutdown_tracker.adapters.storage.sqlite_store import SQLiteShutdownStore, SQLiteUserStore, init_schema
from shutdown_tracker.adapters.geocoding.llm_geocoder import SessionGeocoder
from shutdown_tracker.core.models import UserProfile
from shutdown_tracker.orchestrators.lifecycle import ShutdownLifecycle
from shutdown_tracker.orchestrators.user_admin import UserAdministration
from shutdown_tracker.ports.storage import UserStorePort

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _list(name, default):
    raw = os.getenv(name)
    if raw is None: return default
    return [item.strip() for item in raw.split(",") if item.strip()]

def build_settings() -> Settings:
    s = Settings()

    # storage
    s.storage.db_path = os.getenv("SHUTDOWN_DB_PATH", s.storage.db_path)

    # geocoding
    s.geocoder.base_url = os.getenv("GEOCODER_URL", s.geocoder.base_url)
    s.geocoder.endpoint = os.getenv("GEOCODER_ENDPOINT", s.geocoder.endpoint)
    s.geocoder.api_key = os.getenv("GEOCODER_API_KEY", s.geocoder.api_key)
    s.geocoder.timeout_sec = int(os.getenv("GEOCODER_TIMEOUT_SEC", s.geocoder.timeout_sec))
    s.geocoder.country = os.getenv("GEOCODER_COUNTRY", s.geocoder.country)
    s.geocoder.add_context_from_internet = _b("GEOCODER_ADD_CONTEXT", s.geocoder.add_context_from_internet)

    # classification
    scheme = os.getenv("CLASSIFICATION_SCHEME", s.classification.scheme).lower()
    if scheme not in ("reason", "action"):
        raise ValueError(f"CLASSIFICATION_SCHEME must be 'reason' or 'action', got {scheme!r}")
    s.classification.scheme = scheme
    s.classification.allowed_reasons = _list("ALLOWED_REASONS", s.classification.allowed_reasons)

    # auth
    s.auth.user_header = os.getenv("AUTH_USER_HEADER", s.auth.user_header)
    s.auth.login_url = os.getenv("LOGIN_URL", s.auth.login_url)
    s.auth.logout_url = os.getenv("LOGOUT_URL", s.auth.logout_url)

    # observability
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level).upper()
    s.observability.log_format = os.getenv("LOG_FORMAT", s.observability.log_format).lower()

    return s

async def bootstrap_admin(users: UserStorePort, email: str) -> None:
    """Register the first account admin so someone can grant access levels."""
    await users.add(UserProfile(email=email, role="admin", access_level="admin",
                                created_at=datetime.now(timezone.utc)))

async def main():
    setup_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FORMAT", "dev"))
    log = get_logger()

    s = build_settings()
    setup_logging(s.observability.log_level, s.observability.log_format)
    log.info("settings loaded", scheme=s.classification.scheme, db_path=s.storage.db_path)

    await init_schema(s.storage.db_path)
    store = SQLiteShutdownStore(s.storage.db_path)
    users = SQLiteUserStore(s.storage.db_path)

    admin_email = os.getenv("ADMIN_EMAIL")
    if admin_email:
        await bootstrap_admin(users, admin_email)

    geocoder = SessionGeocoder(
        base_url=s.geocoder.base_url,
        api_key=s.geocoder.api_key,
        endpoint=s.geocoder.endpoint,
        timeout=s.geocoder.timeout_sec,
    )
    lifecycle = ShutdownLifecycle(
        store, geocoder,
        scheme=s.classification.scheme,
        allowed_reasons=s.classification.allowed_reasons,
        country=s.geocoder.country,
        add_context=s.geocoder.add_context_from_internet,
    )
    app = create_app(s, lifecycle, UserAdministration(users), users)

    server = uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=s.observability.http_port, log_level="info")
    )
    http_task = asyncio.create_task(server.serve())
    log.info("http server started", port=s.observability.http_port)

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    await asyncio.wait({stop, http_task}, return_when=asyncio.FIRST_COMPLETED)
    server.should_exit = True
    await http_task
    log.info("shutdown tracker stopped")

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
