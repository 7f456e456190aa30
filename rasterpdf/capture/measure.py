import math
import time

from loguru import logger

from rasterpdf.capture import MEASURE_TARGET_JS, VISIBLE_HEIGHT_JS, WAIT_FOR_IMAGES_JS, SETTLE_LAYOUT_JS, \
    IMAGE_LOAD_TIMEOUT_MS, LAYOUT_SETTLE_MS, DEVICE_PIXEL_SCALE
from rasterpdf.capture.model import CaptureTarget, Insets
from rasterpdf.exceptions import NoDimensions


async def wait_for_images(element, timeout_ms=IMAGE_LOAD_TIMEOUT_MS):
    """Wait until every <img> under the element has decoded (or failed), and web fonts are ready."""
    start = time.time()
    count = await element.evaluate(WAIT_FOR_IMAGES_JS, timeout_ms)
    logger.debug(f"Waited for {count} image(s) in {time.time() - start:.2f}s")
    return count


async def settle_layout(page, max_wait_ms=LAYOUT_SETTLE_MS):
    # Falls back to the bounded delay only when animation frames never arrive
    settled = await page.evaluate(SETTLE_LAYOUT_JS, max_wait_ms)
    if not settled:
        logger.debug(f"No animation frame within {max_wait_ms}ms, continuing after the bounded delay")
    return settled


async def measure_visible_height(element):
    """Height that is currently visible through any clipping ancestors, taken before normalizing."""
    return await element.evaluate(VISIBLE_HEIGHT_JS)


def target_from_geometry(geometry, device_pixel_scale=DEVICE_PIXEL_SCALE, visible_height=0):
    width = math.ceil(geometry.get('width') or 0)
    full_height = math.ceil(max(
        geometry.get('scroll_height') or 0,
        geometry.get('offset_height') or 0,
        geometry.get('rect_height') or 0,
        geometry.get('max_bottom') or 0,
    ))

    if width <= 0 or full_height <= 0:
        raise NoDimensions(width=width, height=full_height)

    insets = Insets(
        padding_left=geometry.get('padding_left') or 0,
        padding_right=geometry.get('padding_right') or 0,
        margin_left=geometry.get('margin_left') or 0,
        margin_right=geometry.get('margin_right') or 0,
        border_left=geometry.get('border_left') or 0,
        border_right=geometry.get('border_right') or 0,
    )

    return CaptureTarget(x=geometry.get('x') or 0,
                         y=geometry.get('y') or 0,
                         width=width,
                         full_height=full_height,
                         visible_height=visible_height or 0,
                         device_pixel_scale=device_pixel_scale,
                         insets=insets)


async def measure_target(element, device_pixel_scale=DEVICE_PIXEL_SCALE, visible_height=0):
    """
    Measure the true (unclipped) size of an already normalized element.

    Uses the largest of scrollHeight, offsetHeight, the bounding box and the bottom-most
    visible descendant so nothing below the fold gets lost.
    """
    geometry = await element.evaluate(MEASURE_TARGET_JS)
    target = target_from_geometry(geometry, device_pixel_scale=device_pixel_scale, visible_height=visible_height)

    logger.debug(f"Component dimensions after removing constraints: {target.width}x{target.full_height}px "
                 f"(scrollHeight: {geometry.get('scroll_height')}px, maxBottom: {geometry.get('max_bottom')}px, "
                 f"visible before: {visible_height}px)")
    logger.debug(f"Insets: {target.insets.left}px left, {target.insets.right}px right")
    return target
