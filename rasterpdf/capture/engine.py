# Chromium cannot paint one screenshot taller than its maximum texture/canvas size, pages above
# that come back truncated or not at all. Tall targets are therefore captured window by window:
# the element is shifted up with a CSS transform so the wanted window sits where the element
# starts, that region is screenshotted, and the result is pasted into one master image.
#
# The transform lives on the one shared element, so the windows are captured strictly one after
# another, top to bottom.

import io
import time

from loguru import logger
from PIL import Image, UnidentifiedImageError
from playwright.async_api import Error as PlaywrightError

from rasterpdf.capture import MAX_CANVAS_HEIGHT_PX, CHUNK_OVERLAP_PX, LAYOUT_SETTLE_MS, TRANSLATE_WINDOW_JS, \
    RESTORE_WINDOW_JS, HEIGHT_MISMATCH_TOLERANCE, BLANK_PIXEL_THRESHOLD
from rasterpdf.capture.chunking import plan_chunks, needs_chunking
from rasterpdf.capture.integrity import check_capture_integrity, has_visible_content
from rasterpdf.capture.measure import settle_layout
from rasterpdf.exceptions import RasterizerUnavailable


async def screenshot_region(page, x, y, width, height):
    """Screenshot a region in document coordinates and decode it, at the context's device scale."""
    clip = {'x': x, 'y': y, 'width': width, 'height': height}
    try:
        png = await page.screenshot(type='png', clip=clip, full_page=True, animations='disabled')
    except PlaywrightError as e:
        raise RasterizerUnavailable(f"Screenshot of {width}x{height}px at ({x}, {y}) failed: {e}") from e

    try:
        with io.BytesIO(png) as buf:
            with Image.open(buf) as img:
                img.load()
                return img.convert('RGB')
    except (UnidentifiedImageError, OSError) as e:
        raise RasterizerUnavailable(f"Could not decode screenshot: {e}") from e


async def capture_single_pass(page, target):
    logger.debug(f"Height ({target.full_height}px) is within limits. Capturing in single pass...")
    return await screenshot_region(page, target.x, target.y, target.width, target.full_height)


async def capture_chunked(page, element, target, windows, settle_ms=LAYOUT_SETTLE_MS,
                          tolerance=HEIGHT_MISMATCH_TOLERANCE, blank_threshold=BLANK_PIXEL_THRESHOLD):
    scale = target.device_pixel_scale
    logger.debug(f"Content is very long ({target.full_height}px). Capturing in {len(windows)} chunks to avoid browser limits")

    # Allocate the final image upfront so only one chunk is held at a time
    master = Image.new('RGB', (target.expected_raster_width, target.expected_raster_height), 'white')
    try:
        for n, window in enumerate(windows, start=1):
            logger.debug(f"Capturing chunk {n}/{len(windows)}: y={window.start_offset_px}px to {window.end_offset_px}px ({window.height_px}px tall)")

            previous = await element.evaluate(TRANSLATE_WINDOW_JS, window.start_offset_px)
            try:
                await settle_layout(page, settle_ms)
                chunk = await screenshot_region(page, target.x, target.y, target.width, window.height_px)
            finally:
                await element.evaluate(RESTORE_WINDOW_JS, previous)

            # A chunk that hit the canvas limit would only leave white rows in the full size master
            with chunk:
                check_capture_integrity(chunk, window.height_px * scale, tolerance=tolerance, blank_threshold=blank_threshold)

                dest_y = window.start_offset_px * scale
                source_height = min(chunk.height, (target.full_height - window.start_offset_px) * scale)
                master.paste(chunk.crop((0, 0, chunk.width, source_height)), (0, dest_y))
            logger.debug(f"Chunk {n} captured ({chunk.width}x{chunk.height}px) and added to master canvas at y={dest_y}px")

    except Exception:
        master.close()
        raise

    logger.debug(f"All {len(windows)} chunks captured. Master canvas: {master.width}x{master.height}px")
    return master


async def capture_target(page,
                         element,
                         target,
                         max_canvas_height_px=MAX_CANVAS_HEIGHT_PX,
                         overlap_px=CHUNK_OVERLAP_PX,
                         settle_ms=LAYOUT_SETTLE_MS,
                         tolerance=HEIGHT_MISMATCH_TOLERANCE,
                         blank_threshold=BLANK_PIXEL_THRESHOLD):
    """
    Capture the whole (normalized, measured) element into one RGB image.

    :return: PIL image of roughly target.width*scale x target.full_height*scale
    """
    start = time.time()
    scale = target.device_pixel_scale

    if needs_chunking(target.full_height, scale, max_canvas_height_px):
        windows = plan_chunks(target.full_height, scale, max_canvas_height_px, overlap_px)
        image = await capture_chunked(page, element, target, windows, settle_ms=settle_ms,
                                      tolerance=tolerance, blank_threshold=blank_threshold)
    else:
        image = await capture_single_pass(page, target)

    if image.width == 0 or image.height == 0:
        image.close()
        raise RasterizerUnavailable("Failed to capture content as an image")

    logger.debug(f"Canvas captured in {time.time() - start:.2f}s: {image.width}x{image.height}px, "
                 f"expected height {target.full_height}px (at scale {scale}: {target.expected_raster_height}px)")

    try:
        check_capture_integrity(image, target.expected_raster_height, tolerance=tolerance, blank_threshold=blank_threshold)
    except Exception:
        image.close()
        raise

    if not has_visible_content(image, blank_threshold=blank_threshold):
        logger.warning("Canvas appears to be blank. This might indicate the component is not visible.")

    return image
