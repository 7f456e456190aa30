"""
Print-to-PDF fallback

Skips rasterizing altogether: the element is cloned with every height/overflow constraint
stripped, the document's readable stylesheet rules are inlined next to it, and Chromium's own
print pipeline paginates the result. No canvas size limit applies, but there is also no page
band control, the layout engine decides where pages break.
"""
import importlib.resources
import os

import jinja2.sandbox
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from rasterpdf.capture import PRINT_CLONE_JS
from rasterpdf.capture.measure import wait_for_images, settle_layout
from rasterpdf.exceptions import PrintWindowBlocked, RasterizerUnavailable

PRINT_PAGE_SIZE = os.getenv("RASTERPDF_PRINT_PAGE_SIZE", 'A4')
PRINT_MARGIN = os.getenv("RASTERPDF_PRINT_MARGIN", '15mm')


def render_print_document(content, styles, font_family=None, title='Print', page_size=PRINT_PAGE_SIZE, margin=PRINT_MARGIN):
    template_str = importlib.resources.files("rasterpdf.templates").joinpath('print_document.html').read_text(encoding='utf-8')
    # Content and CSS are markup taken from our own page, they must not be escaped
    jinja2_env = jinja2.sandbox.ImmutableSandboxedEnvironment(autoescape=False)
    return jinja2_env.from_string(template_str).render(
        content=content,
        styles="\n".join(styles or []),
        font_family=font_family,
        title=title,
        page_size=page_size,
        margin=margin,
    )


async def collect_printable(element):
    printable = await element.evaluate(PRINT_CLONE_JS)
    for href in printable.get('skipped') or []:
        logger.warning(f"Could not access stylesheet (cross-origin?) {href}, skipping")
    logger.debug(f"Collected {len(printable.get('styles') or [])} stylesheet rule(s) for printing")
    return printable


async def print_element_to_pdf(page, element, title='Print', page_size=PRINT_PAGE_SIZE, margin=PRINT_MARGIN, print_background=True):
    printable = await collect_printable(element)
    html = render_print_document(content=printable['html'],
                                 styles=printable.get('styles'),
                                 font_family=printable.get('font_family'),
                                 title=title,
                                 page_size=page_size,
                                 margin=margin)

    # A second page in the same context stands in for the print window
    try:
        print_page = await page.context.new_page()
    except PlaywrightError as e:
        raise PrintWindowBlocked(str(e)) from e

    try:
        await print_page.set_content(html, wait_until='load')
        content = await print_page.query_selector('#print-content')
        if content:
            await wait_for_images(content)
        await settle_layout(print_page)

        full_height = await print_page.evaluate("document.getElementById('print-content').scrollHeight")
        logger.debug(f"Print content full height: {full_height}px")

        try:
            pdf_bytes = await print_page.pdf(format=page_size,
                                             print_background=print_background,
                                             prefer_css_page_size=True,
                                             margin={'top': margin, 'right': margin, 'bottom': margin, 'left': margin})
        except PlaywrightError as e:
            raise RasterizerUnavailable(f"Browser print to PDF failed: {e}") from e
    finally:
        await print_page.close()

    logger.debug(f"Browser print produced {len(pdf_bytes)} bytes")
    return pdf_bytes
