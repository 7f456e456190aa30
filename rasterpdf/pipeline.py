"""
Element to PDF pipeline

    normalize constraints -> measure -> capture (single pass or chunked) -> restore
        -> crop -> paginate -> save

Every stage raises on failure, nothing is retried, and no file is written unless every stage
succeeded. The normalized styles are restored on every exit path.
"""
import asyncio
import os
import time
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from rasterpdf.capture import DEVICE_PIXEL_SCALE, MAX_CANVAS_HEIGHT_PX, CHUNK_OVERLAP_PX, LAYOUT_SETTLE_MS, \
    IMAGE_LOAD_TIMEOUT_MS, PAGE_WIDTH_MM, PAGE_HEIGHT_MM, HEIGHT_MISMATCH_TOLERANCE, BLANK_PIXEL_THRESHOLD, \
    DEFAULT_ELEMENT_ID
from rasterpdf.capture.engine import capture_target
from rasterpdf.capture.measure import wait_for_images, settle_layout, measure_visible_height, measure_target
from rasterpdf.capture.normalizer import normalized_constraints
from rasterpdf.exceptions import TargetNotFound, PageCountMismatch
from rasterpdf.paginator import crop_to_content, paginate
from rasterpdf.print_fallback import print_element_to_pdf, PRINT_MARGIN, PRINT_PAGE_SIZE
from rasterpdf.validation import validate_pdf_page_count


@dataclass
class GenerationOptions:
    # Must match the device_scale_factor of the browser context the page lives in
    device_pixel_scale: int = DEVICE_PIXEL_SCALE
    max_canvas_height_px: int = MAX_CANVAS_HEIGHT_PX
    overlap_px: int = CHUNK_OVERLAP_PX
    settle_ms: int = LAYOUT_SETTLE_MS
    image_timeout_ms: int = IMAGE_LOAD_TIMEOUT_MS
    page_width_mm: float = PAGE_WIDTH_MM
    page_height_mm: float = PAGE_HEIGHT_MM
    tolerance: float = HEIGHT_MISMATCH_TOLERANCE
    blank_threshold: int = BLANK_PIXEL_THRESHOLD
    print_page_size: str = PRINT_PAGE_SIZE
    print_margin: str = PRINT_MARGIN
    expected_pages: Optional[int] = None
    title: Optional[str] = None


def title_from_filename(filename):
    if not filename:
        return None
    name = os.path.basename(filename)
    return name[:-4] if name.lower().endswith('.pdf') else name


async def resolve_element(page, element_id):
    # Attribute selector, ids are not always valid CSS identifiers
    element = await page.query_selector(f'[id="{element_id}"]')
    if element is None:
        raise TargetNotFound(element_id)
    return element


def check_page_count(pdf_bytes, expected_pages):
    if not expected_pages:
        return
    result = validate_pdf_page_count(pdf_bytes, expected_pages=expected_pages)
    if not result.is_valid:
        raise PageCountMismatch(page_count=result.page_count, expected_pages=expected_pages)


def save_pdf(filename, pdf_bytes):
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filename, 'wb') as f:
        f.write(pdf_bytes)
    logger.success(f"Saved {len(pdf_bytes)} bytes to '{filename}'")


async def rasterize_element(page, element, options):
    """Normalize, measure and capture, the page is back to its original styles on return."""
    await wait_for_images(element, options.image_timeout_ms)
    await settle_layout(page, options.settle_ms)

    visible_height = await measure_visible_height(element)

    async with normalized_constraints(page, element):
        await settle_layout(page, options.settle_ms)
        target = await measure_target(element, device_pixel_scale=options.device_pixel_scale, visible_height=visible_height)
        image = await capture_target(page, element, target,
                                     max_canvas_height_px=options.max_canvas_height_px,
                                     overlap_px=options.overlap_px,
                                     settle_ms=options.settle_ms,
                                     tolerance=options.tolerance,
                                     blank_threshold=options.blank_threshold)
    return target, image


async def generate_pdf_from_element(page, element=DEFAULT_ELEMENT_ID, filename=None, options=None):
    """
    Rasterize an element of a live page into a paginated PDF.

    :param page: Playwright page
    :param element: element id, or an ElementHandle
    :param filename: where to save the PDF, nothing is written when None
    :return: PaginatedDocument
    """
    options = options or GenerationOptions()
    title = options.title or title_from_filename(filename)
    start = time.time()

    try:
        if isinstance(element, str):
            element = await resolve_element(page, element)

        target, image = await rasterize_element(page, element, options)

        with image:
            with crop_to_content(image, target.insets, options.device_pixel_scale) as cropped:
                document = paginate(cropped,
                                    device_pixel_scale=options.device_pixel_scale,
                                    page_width_mm=options.page_width_mm,
                                    page_height_mm=options.page_height_mm,
                                    title=title)

        check_page_count(document.pdf_bytes, options.expected_pages)
    except Exception as e:
        logger.error(f"PDF generation error: {e}")
        raise

    logger.debug(f"Generated {document.page_count} page(s) in {time.time() - start:.2f}s")
    if filename:
        save_pdf(filename, document.pdf_bytes)
    return document


async def generate_pdf_using_browser_print(page, element=DEFAULT_ELEMENT_ID, filename=None, options=None):
    """
    Let Chromium's print pipeline paginate the element instead of rasterizing it.

    :return: PDF bytes
    """
    options = options or GenerationOptions()
    title = options.title or title_from_filename(filename) or 'Print'

    try:
        if isinstance(element, str):
            element = await resolve_element(page, element)

        pdf_bytes = await print_element_to_pdf(page, element,
                                               title=title,
                                               page_size=options.print_page_size,
                                               margin=options.print_margin)
        check_page_count(pdf_bytes, options.expected_pages)
    except Exception as e:
        logger.error(f"Browser print error: {e}")
        raise

    if filename:
        save_pdf(filename, pdf_bytes)
    return pdf_bytes


async def generate_from_source(source, filename, element_id=DEFAULT_ELEMENT_ID, browser_print=False, options=None, viewport_width=None):
    from rasterpdf.browser import browser_context, open_source, VIEWPORT_WIDTH

    options = options or GenerationOptions()
    async with browser_context(viewport_width=viewport_width or VIEWPORT_WIDTH,
                               device_pixel_scale=options.device_pixel_scale) as context:
        page = await open_source(context, source)
        try:
            if browser_print:
                return await generate_pdf_using_browser_print(page, element_id, filename, options)
            return await generate_pdf_from_element(page, element_id, filename, options)
        finally:
            await page.close()


def run(source, filename, element_id=DEFAULT_ELEMENT_ID, browser_print=False, options=None, viewport_width=None):
    """Blocking entry point, one generation request from start to finish."""
    return asyncio.run(generate_from_source(source=source,
                                            filename=filename,
                                            element_id=element_id,
                                            browser_print=browser_print,
                                            options=options,
                                            viewport_width=viewport_width))
