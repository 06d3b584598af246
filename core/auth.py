import hmac

from fastapi import Header, HTTPException

from core.config import ADMIN_API_TOKEN


async def require_admin(authorization: str = Header(default="")):
    """Bearer token guard for admin routes."""
    if not ADMIN_API_TOKEN:
        raise HTTPException(status_code=503, detail="Admin access is not configured")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip().encode(), ADMIN_API_TOKEN.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
