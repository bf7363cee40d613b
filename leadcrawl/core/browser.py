"""
Headless-browser retrieval source for JS-rendered directories.

Launches Playwright Chromium with stealth applied, renders the page, and
returns the resulting DOM as HTML. Used as the last entry of the source
chain when ``config.FETCH_ENABLE_BROWSER`` is on.
"""

from typing import Optional

from loguru import logger

import leadcrawl.config as cfg


class BrowserSource:
    """Render *url* in Chromium and hand back ``page.content()``."""

    name = "browser"

    def __init__(self, headless: bool = True) -> None:
        self.headless = headless

    def retrieve(self, url: str, kind: str = "site") -> Optional[str]:
        from playwright.sync_api import sync_playwright
        from playwright_stealth import Stealth

        logger.debug("Rendering with Playwright: {}", url)

        with sync_playwright() as pw:
            browser = pw.chromium.launch(
                headless=self.headless,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--no-sandbox",
                ],
            )
            try:
                context = browser.new_context(
                    viewport={"width": 1920, "height": 1080},
                    locale="en-US",
                    user_agent=cfg.USER_AGENT,
                )
                page = context.new_page()
                Stealth().apply_stealth_sync(page)

                page.goto(url, wait_until="domcontentloaded", timeout=cfg.BROWSER_NAV_TIMEOUT)
                # Give client-side rendering a moment
                page.wait_for_timeout(cfg.BROWSER_RENDER_WAIT)
                return page.content()
            finally:
                browser.close()
