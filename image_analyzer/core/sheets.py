from __future__ import annotations

import logging

from image_analyzer.core.errors import MissingDestination

logger = logging.getLogger(__name__)

NOT_IMPLEMENTED_NOTICE = "Google Sheets export will be available in a future version"


def save_to_sheets(url: str) -> str:
    """Validate the destination URL. No data is sent anywhere yet."""
    if not (url or "").strip():
        raise MissingDestination()
    logger.info("Google Sheets export requested; not implemented")
    return NOT_IMPLEMENTED_NOTICE
