"""Identifier utilities."""

from __future__ import annotations

import uuid


def generate_record_id() -> str:
  """Return a new identifier for a persisted row."""
  return str(uuid.uuid4())
