"""Playwright automation: load a dashboard, click, and intercept its API call.

The data we want never appears in a request we make ourselves. The page
fetches it when a tab is clicked, so the check listens for that response
and races it against a deadline.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Response, async_playwright

from ..config import BROWSER_CHANNEL, BROWSER_HEADLESS, BROWSER_TIMEOUT
from ..constants import CLICK_SETTLE_MS, PAGE_SETTLE_MS, SELECTOR_TIMEOUT_MS
from ..exceptions import LimitCheckError, ProviderUnavailableError, ResponseTimeoutError

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class ResponseRace:
    """First response whose URL contains ``url_substring``, or a timeout.

    Resolves at most once. The deadline starts when the listener is
    attached, which must happen before navigation or an early request can
    slip past.
    """

    def __init__(self, url_substring: str):
        self._url_substring = url_substring
        self._future: Optional[asyncio.Future] = None
        self._deadline: Optional[float] = None
        self._body_task: Optional[asyncio.Task] = None
        self.matched_url: Optional[str] = None

    @property
    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def attach(self, page: Page, timeout_ms: int) -> None:
        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self._deadline = loop.time() + timeout_ms / 1000
        page.on("response", self._on_response)

    def detach(self, page: Page) -> None:
        page.remove_listener("response", self._on_response)
        if self._body_task is not None and not self._body_task.done():
            self._body_task.cancel()
        # Mark a failed body read as retrieved when wait() was never reached
        if self._future is not None and self._future.done() and not self._future.cancelled():
            self._future.exception()

    def _on_response(self, response: Response) -> None:
        if self.matched_url is not None or self._future is None or self._future.done():
            return
        if self._url_substring not in response.url:
            return
        self.matched_url = response.url
        logger.info(f"Intercepted API response: {response.url} (status={response.status})")
        self._body_task = asyncio.ensure_future(self._read_body(response))

    async def _read_body(self, response: Response) -> None:
        try:
            body = await response.json()
        except (PlaywrightError, ValueError) as e:
            if not self._future.done():
                self._future.set_exception(e)
            return
        if not self._future.done():
            self._future.set_result(body)

    async def wait(self) -> Any:
        """Return the matching body, or raise ResponseTimeoutError at the deadline."""
        if self._future is None:
            raise RuntimeError("ResponseRace.wait() called before attach().")
        loop = asyncio.get_running_loop()
        remaining = max(self._deadline - loop.time(), 0)
        try:
            return await asyncio.wait_for(asyncio.shield(self._future), remaining)
        except asyncio.TimeoutError:
            raise ResponseTimeoutError(
                f"Timeout waiting for API response matching '{self._url_substring}'",
                url_substring=self._url_substring,
            ) from None


async def capture_api_response(
    page: Page,
    target_url: str,
    trigger_selector: str,
    api_url_substring: str,
    timeout_ms: int,
    trigger_text: Optional[str] = None,
    settle_ms: int = PAGE_SETTLE_MS,
    click_settle_ms: int = CLICK_SETTLE_MS,
    selector_timeout_ms: int = SELECTOR_TIMEOUT_MS,
) -> Any:
    """Navigate, click the trigger, and return the intercepted JSON body.

    Raises:
        LimitCheckError: the trigger element never became clickable.
        ResponseTimeoutError: no matching response before ``timeout_ms``.
    """
    race = ResponseRace(api_url_substring)
    race.attach(page, timeout_ms)
    try:
        logger.info(f"Navigating to {target_url}")
        await page.goto(target_url, wait_until="load", timeout=timeout_ms)

        # Client-side rendering continues after the load event
        await page.wait_for_timeout(settle_ms)

        label = trigger_text or trigger_selector
        try:
            await page.wait_for_selector(trigger_selector, timeout=selector_timeout_ms)
            trigger = page.locator(trigger_selector)
            if trigger_text:
                trigger = trigger.filter(has_text=trigger_text)
            trigger = trigger.first
            await trigger.wait_for(state="visible", timeout=selector_timeout_ms)
            await trigger.click(timeout=selector_timeout_ms)
            await page.wait_for_timeout(click_settle_ms)
        except PlaywrightError as e:
            raise LimitCheckError(f"Failed to find or click {label} tab") from e

        return await race.wait()
    finally:
        race.detach(page)


async def fetch_via_api(
    profile_dir: str,
    target_url: str,
    trigger_selector: str,
    api_url_substring: str,
    timeout_ms: int = BROWSER_TIMEOUT,
    trigger_text: Optional[str] = None,
    output_dir: Optional[str] = None,
    headless: bool = BROWSER_HEADLESS,
    channel: str = BROWSER_CHANNEL,
) -> Any:
    """Run ``capture_api_response`` in a persistent, already-authenticated profile.

    The browser context is closed on every exit path.
    """
    launch_options: dict[str, Any] = {"headless": headless, "channel": channel}
    if output_dir:
        launch_options["downloads_path"] = output_dir

    async with async_playwright() as playwright:
        logger.info(f"Launching {channel} (headless={headless}) with profile {profile_dir}")
        try:
            context = await playwright.chromium.launch_persistent_context(profile_dir, **launch_options)
        except PlaywrightError as e:
            raise ProviderUnavailableError(f"Failed to launch browser: {e}") from e

        try:
            page = await context.new_page()
            page.set_default_timeout(timeout_ms)
            return await capture_api_response(
                page,
                target_url,
                trigger_selector,
                api_url_substring,
                timeout_ms,
                trigger_text=trigger_text,
            )
        finally:
            await context.close()
