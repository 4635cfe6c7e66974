import hmac

from fastapi import Request

from config import CRON_SECRET
from errors import AuthError
from supabase_client import get_user_from_token

ACCESS_TOKEN_COOKIE = "sb-access-token"


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def get_current_user(request: Request) -> str:
    """
    FastAPI dependency — reads the Supabase access token from the
    Authorization header (or the sb-access-token cookie), resolves it with
    Supabase Auth and returns the user id.
    Raises AuthError (401) if the token is missing or rejected.
    """
    token = _bearer_token(request) or request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise AuthError()

    user = get_user_from_token(token)
    if user is None or not getattr(user, "id", None):
        raise AuthError()
    return str(user.id)


def require_scheduler(request: Request) -> None:
    """
    FastAPI dependency for cron-invoked endpoints. When CRON_SECRET is set
    the caller must present it as a bearer token; otherwise the endpoint is open.
    """
    if not CRON_SECRET:
        return
    token = _bearer_token(request) or ""
    if not hmac.compare_digest(token, CRON_SECRET):
        raise AuthError("Invalid scheduler credentials")
