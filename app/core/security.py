from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from app.core.firebase import verify_id_token

# auto_error=False so a missing header reaches our 401 instead of FastAPI's 403.
security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CallerIdentity:
  """Verified caller; ``user_id`` is stored on generated rows as an opaque string."""

  user_id: str
  claims: dict[str, Any]


def _unauthorized(detail: str) -> HTTPException:
  return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers={"WWW-Authenticate": "Bearer"})


async def get_current_identity(token: Annotated[HTTPAuthorizationCredentials | None, Depends(security_scheme)]) -> CallerIdentity:
  """Verify the Firebase ID token and expose the caller's uid."""
  if token is None or not token.credentials:
    raise _unauthorized("Unauthorized")

  decoded_claims = await run_in_threadpool(verify_id_token, token.credentials)
  if not decoded_claims:
    raise _unauthorized("Invalid authentication credentials")

  firebase_uid = decoded_claims.get("uid")
  if not firebase_uid:
    raise _unauthorized("Invalid token claims")

  return CallerIdentity(user_id=str(firebase_uid), claims=decoded_claims)
