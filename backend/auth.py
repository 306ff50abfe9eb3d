"""
X-API-Key authentication for the fantasy backend.

Two levels:

    verify_api_key        reading bet options (``/api/bet-options/...``)
    verify_admin_api_key  anything that spends API-Football quota or rewrites
                          stored data: availability syncs, bet generation,
                          ``/admin/...``

Keys come from API_KEY_USER1..5; the user slot number names the caller in
logs.  Admins are listed by slot name in ADMIN_USERS (default ``user1``).
"""

from fastapi import Security, HTTPException, status
from fastapi.security import APIKeyHeader
import os
from typing import Dict
from dotenv import load_dotenv

load_dotenv()

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)

MAX_KEY_SLOTS = 5
DEV_API_KEY = "dev-key-insecure"

ADMIN_USERS = frozenset(
    u.strip() for u in os.getenv("ADMIN_USERS", "user1").split(",") if u.strip()
)


def get_valid_api_keys() -> Dict[str, str]:
    """{api_key: "userN"} for every configured slot"""
    keys = {
        os.environ[f"API_KEY_USER{slot}"]: f"user{slot}"
        for slot in range(1, MAX_KEY_SLOTS + 1)
        if os.getenv(f"API_KEY_USER{slot}")
    }
    if keys:
        return keys

    if os.getenv("ENVIRONMENT") == "development":
        return {DEV_API_KEY: "user1"}
    raise ValueError("No API keys configured! Set API_KEY_USER1 in environment")


VALID_API_KEYS = get_valid_api_keys()


def _reject(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "ApiKey"},
    )


async def verify_api_key(api_key: str = Security(API_KEY_HEADER)) -> str:
    if not api_key:
        raise _reject("API key required. Include 'X-API-Key' header.")
    user = VALID_API_KEYS.get(api_key)
    if user is None:
        raise _reject("Invalid API key")
    return user


async def verify_admin_api_key(user: str = Security(verify_api_key)) -> str:
    """Sync and generation triggers, scheduler status"""
    if user not in ADMIN_USERS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
