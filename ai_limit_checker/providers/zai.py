"""Z.ai client: intercepts the quota API behind the subscription dashboard."""

from __future__ import annotations

import json
import logging
import sys

from ..config import BROWSER_TIMEOUT, ChromeConfig, write_debug_capture
from ..constants import ZAI_QUOTA_API, ZAI_SUBSCRIPTION_URL, ZAI_TAB_SELECTOR, ZAI_USAGE_TAB_TEXT
from ..models.usage import ZaiLimit
from ..session_manager.browser import fetch_via_api
from ..session_manager.parser import parse_zai_response

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class ZaiClient:
    """Reads Z.ai quota limits through a logged-in Chrome profile."""

    def __init__(self, config: ChromeConfig, timeout_ms: int = BROWSER_TIMEOUT):
        self._config = config
        self._timeout_ms = timeout_ms

    async def get_usage_quota(self) -> list[ZaiLimit]:
        body = await fetch_via_api(
            self._config.user_data_dir,
            ZAI_SUBSCRIPTION_URL,
            ZAI_TAB_SELECTOR,
            ZAI_QUOTA_API,
            timeout_ms=self._timeout_ms,
            trigger_text=ZAI_USAGE_TAB_TEXT,
            output_dir=self._config.output_dir,
        )

        try:
            write_debug_capture("zai-debug-response.json", json.dumps(body, indent=2))
        except (OSError, TypeError) as e:
            logger.warning(f"Could not save Z.ai debug capture: {e}")

        return parse_zai_response(body)
