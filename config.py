"""
Runtime configuration

Settings are read from the environment once, when the app starts. Recognised
variables:
- DB_URI: MongoDB connection string (database name taken from its path)
- TOKEN_SECRET: secret used to sign access tokens, required
- PORT: port for the development server
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field

DEFAULT_DB_URI = "mongodb://localhost:27017/meddonate"
DEFAULT_DB_NAME = "meddonate"
DEFAULT_PORT = 8000
ALGORITHM = "HS256"


class Settings(BaseModel):
    db_uri: str = Field(DEFAULT_DB_URI, description="MongoDB connection string")
    token_secret: str = Field(..., min_length=1, description="HMAC secret for access tokens")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    secret = env.get("TOKEN_SECRET")
    if not secret:
        raise RuntimeError("TOKEN_SECRET is not set")
    return Settings(
        db_uri=env.get("DB_URI") or DEFAULT_DB_URI,
        token_secret=secret,
        port=int(env.get("PORT") or DEFAULT_PORT),
    )
