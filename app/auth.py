"""Capability checks for the search endpoint."""
from __future__ import annotations

import logging
import secrets

from fastapi import Header

from .config import settings

logger = logging.getLogger(__name__)


def can_edit_products(x_api_key: str | None = Header(default=None)) -> bool:
    """True when the caller presents one of the editor API keys.

    Editors see drafts, private and scheduled downloads in the dropdown.
    """
    if not x_api_key:
        return False
    allowed = any(secrets.compare_digest(x_api_key.encode(), key.encode()) for key in settings.editor_api_keys)
    if not allowed:
        logger.debug("unrecognized editor key presented")
    return allowed
