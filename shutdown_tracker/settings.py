# shutdown_tracker/settings.py
from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, Field

class StorageConfig(BaseModel):
    db_path: str = "/data/shutdowns.db"

class GeocoderConfig(BaseModel):
    base_url: str = "http://localhost:8787"
    endpoint: str = "/integrations/llm/invoke"
    api_key: str = ""
    timeout_sec: int = 30
    country: str = "Canadian"                 # used in the lookup instruction
    add_context_from_internet: bool = True

class ClassificationConfig(BaseModel):
    scheme: Literal["reason", "action"] = "action"
    # empty means every known reason is accepted
    allowed_reasons: list[str] = Field(default_factory=list)

class AuthConfig(BaseModel):
    user_header: str = "X-Forwarded-Email"    # set by the auth proxy
    login_url: str = "/oauth2/start"
    logout_url: str = "/oauth2/sign_out"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "shutdown-tracker"
    build_version: str = "0.4.0"
    build_date: str = "2025-11-01"
    log_level: str = "INFO"
    log_format: Literal["dev", "json"] = "dev"

class Settings(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    geocoder: GeocoderConfig = Field(default_factory=GeocoderConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    observability: Observability = Field(default_factory=Observability)
