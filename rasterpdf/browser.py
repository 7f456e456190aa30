import os
from contextlib import asynccontextmanager
from pathlib import Path

from loguru import logger
from playwright.async_api import async_playwright, Error as PlaywrightError

from rasterpdf.capture import DEVICE_PIXEL_SCALE
from rasterpdf.exceptions import BrowserConnectError
from rasterpdf.strtobool import env_bool

VIEWPORT_WIDTH = int(os.getenv("RASTERPDF_VIEWPORT_WIDTH", 1280))
VIEWPORT_HEIGHT = int(os.getenv("RASTERPDF_VIEWPORT_HEIGHT", 1024))


def browser_connection_url():
    # .strip('"') is going to save someone a lot of time when they accidently wrap the env value
    url = os.getenv("PLAYWRIGHT_DRIVER_URL", '').strip('"')
    return url or None


@asynccontextmanager
async def browser_context(viewport_width=VIEWPORT_WIDTH, viewport_height=VIEWPORT_HEIGHT, device_pixel_scale=DEVICE_PIXEL_SCALE):
    """
    Chromium browser context rendering at `device_pixel_scale`.

    Connects over CDP to PLAYWRIGHT_DRIVER_URL when that is set (for example a browserless
    container), otherwise launches a local Chromium.
    """
    connection_url = browser_connection_url()
    async with async_playwright() as p:
        try:
            if connection_url:
                logger.debug(f"Connecting to browser at {connection_url}")
                browser = await p.chromium.connect_over_cdp(connection_url, timeout=60000)
            else:
                browser = await p.chromium.launch(headless=env_bool('RASTERPDF_HEADLESS', True))
        except PlaywrightError as e:
            raise BrowserConnectError(msg=f"Error connecting to the browser {str(e)}") from e

        try:
            context = await browser.new_context(viewport={'width': viewport_width, 'height': viewport_height},
                                                device_scale_factor=device_pixel_scale)
            try:
                yield context
            finally:
                await context.close()
        finally:
            await browser.close()


async def open_source(context, source):
    """
    Open a page on `source`, which is a URL, a path to an HTML file, or raw HTML.
    """
    page = await context.new_page()
    if source.startswith(('http://', 'https://', 'file://')):
        await page.goto(source, wait_until='load')
        return page

    if source.lstrip().startswith('<'):
        await page.set_content(source, wait_until='load')
        return page

    path = Path(source)
    if not path.is_file():
        await page.close()
        raise FileNotFoundError(f"No such HTML file or URL: {source}")

    if browser_connection_url():
        # A remote browser cannot see our filesystem
        await page.set_content(path.read_text(encoding='utf-8'), wait_until='load')
    else:
        await page.goto(path.resolve().as_uri(), wait_until='load')
    return page
