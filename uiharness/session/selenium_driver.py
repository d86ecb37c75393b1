"""
Selenium WebDriver implementation of the browser driver interface.

Supports Chrome, Firefox and Edge, launched locally (drivers resolved by
Selenium Manager) or on a Selenium Grid through webdriver.Remote.
"""

import logging
from typing import Any, Optional

from selenium import webdriver

from .driver import BrowserDriver
from .models import BrowserKind, SessionOptions

CHROME_ARGUMENTS = [
    "--disable-notifications",
    "--start-maximized",
    "--disable-popup-blocking",
    "--disable-dev-shm-usage",
    "--no-sandbox",
]


class SeleniumDriver(BrowserDriver):
    """Browser driver backed by Selenium WebDriver."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def build_options(self, kind: BrowserKind, headless: bool) -> Any:
        """
        Build browser-specific options.

        Args:
            kind: Browser engine
            headless: Whether to run without a visible window

        Returns:
            Selenium options object for the browser
        """
        if kind is BrowserKind.CHROME:
            options = webdriver.ChromeOptions()
            if headless:
                options.add_argument("--headless=new")
            for argument in CHROME_ARGUMENTS:
                options.add_argument(argument)
        elif kind is BrowserKind.FIREFOX:
            options = webdriver.FirefoxOptions()
            if headless:
                options.add_argument("--headless")
        else:
            options = webdriver.EdgeOptions()
            if headless:
                options.add_argument("--headless=new")
            options.add_argument("--start-maximized")
        return options

    def open_session(self, kind: BrowserKind, options: SessionOptions) -> Any:
        browser_options = self.build_options(kind, options.headless)

        if options.remote:
            self.logger.debug(f"Opening remote {kind.value} session on {options.grid_url}")
            return webdriver.Remote(
                command_executor=options.grid_url, options=browser_options
            )

        self.logger.debug(f"Opening local {kind.value} session")
        if kind is BrowserKind.CHROME:
            return webdriver.Chrome(options=browser_options)
        if kind is BrowserKind.FIREFOX:
            return webdriver.Firefox(options=browser_options)
        return webdriver.Edge(options=browser_options)

    def apply_timeouts(
        self, handle: Any, implicit_wait: int, page_load_timeout: int
    ) -> None:
        handle.implicitly_wait(implicit_wait)
        handle.set_page_load_timeout(page_load_timeout)

    def maximize_window(self, handle: Any) -> None:
        handle.maximize_window()

    def navigate(self, handle: Any, url: str) -> None:
        handle.get(url)

    def close_session(self, handle: Any) -> None:
        handle.quit()

    def snapshot(self, handle: Any) -> bytes:
        return handle.get_screenshot_as_png()
