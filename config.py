import os
from dataclasses import dataclass, field
from typing import List

SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")
HTTP_TIMEOUT = float(os.getenv("TASKFLOW_HTTP_TIMEOUT", "30"))
ROLE_CACHE_TTL = float(os.getenv("TASKFLOW_ROLE_CACHE_TTL", "300"))
SESSION_TTL = float(os.getenv("TASKFLOW_SESSION_TTL", "3600"))
CORS_ORIGINS = [o.strip() for o in os.getenv("TASKFLOW_CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
LOG_LEVEL = os.getenv("TASKFLOW_LOG_LEVEL", "INFO").upper()
COOKIE_SECURE = os.getenv("TASKFLOW_COOKIE_SECURE", "false").lower() == "true"


@dataclass
class Settings:
    supabase_url: str = SUPABASE_URL
    supabase_anon_key: str = SUPABASE_ANON_KEY
    supabase_jwt_secret: str = SUPABASE_JWT_SECRET
    http_timeout: float = HTTP_TIMEOUT
    role_cache_ttl: float = ROLE_CACHE_TTL
    session_ttl: float = SESSION_TTL
    cors_origins: List[str] = field(default_factory=lambda: list(CORS_ORIGINS))
    cookie_secure: bool = COOKIE_SECURE
