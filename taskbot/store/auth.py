from __future__ import annotations

import json
import os
import threading
from typing import Any, Optional

import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2.service_account import Credentials
from loguru import logger

from taskbot.config import settings
from taskbot.core.errors import StoreUnavailable

_lock = threading.Lock()
_credentials: Optional[Credentials] = None


def _load_info() -> dict[str, Any] | None:
    raw = (settings.google_credentials or "").strip()
    if raw:
        try:
            info = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreUnavailable(f"GOOGLE_CREDENTIALS is not valid JSON: {exc}") from exc
        return info if isinstance(info, dict) and info else None
    path = (settings.google_credentials_file or "").strip()
    if path and os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as handle:
                info = json.load(handle)
        except (OSError, ValueError) as exc:
            raise StoreUnavailable(f"GOOGLE_CREDENTIALS_FILE could not be read: {exc}") from exc
        return info if isinstance(info, dict) and info else None
    return None


def _build_credentials() -> Credentials:
    info = _load_info()
    if not info:
        raise StoreUnavailable("Google service account credentials are not configured")
    try:
        return Credentials.from_service_account_info(info, scopes=settings.google_scopes)
    except (ValueError, KeyError) as exc:
        raise StoreUnavailable(f"Google service account credentials are invalid: {exc}") from exc


def get_access_token() -> str:
    global _credentials
    with _lock:
        if _credentials is None:
            _credentials = _build_credentials()
        if _credentials.valid:
            return _credentials.token
        try:
            _credentials.refresh(Request())
        except google.auth.exceptions.GoogleAuthError as exc:
            raise StoreUnavailable(f"Google token refresh failed: {exc}") from exc
        logger.info("Refreshed Google access token (expiry {})", _credentials.expiry)
        return _credentials.token


def reset_credentials() -> None:
    global _credentials
    with _lock:
        _credentials = None
