"""Caller identity resolution from Firebase bearer tokens."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from app.core.security import CallerIdentity, get_current_identity


@pytest.fixture
def mock_verify_id_token():
  with patch("app.core.security.verify_id_token") as mock_verify:
    yield mock_verify


def _bearer(token: str) -> HTTPAuthorizationCredentials:
  return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.anyio
async def test_valid_token_yields_identity(mock_verify_id_token) -> None:
  mock_verify_id_token.return_value = {"uid": "firebase-uid", "email": "ana@example.com"}
  identity = await get_current_identity(_bearer("token"))
  assert identity == CallerIdentity(user_id="firebase-uid", claims={"uid": "firebase-uid", "email": "ana@example.com"})
  mock_verify_id_token.assert_called_once_with("token")


@pytest.mark.anyio
async def test_missing_token_is_unauthorized(mock_verify_id_token) -> None:
  with pytest.raises(HTTPException) as exc_info:
    await get_current_identity(None)
  assert exc_info.value.status_code == 401
  mock_verify_id_token.assert_not_called()


@pytest.mark.anyio
@pytest.mark.parametrize("claims", [None, {}, {"email": "no-uid@example.com"}])
async def test_unverifiable_token_is_unauthorized(mock_verify_id_token, claims) -> None:
  mock_verify_id_token.return_value = claims
  with pytest.raises(HTTPException) as exc_info:
    await get_current_identity(_bearer("bad"))
  assert exc_info.value.status_code == 401
  assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
