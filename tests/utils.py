"""Shared constants for the test suite."""

from __future__ import annotations

ADMIN_EMAIL = "admin@x.com"
ADMIN_PASSWORD = "s3cret-admin-pass"
