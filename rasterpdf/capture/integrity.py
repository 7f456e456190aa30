"""
Post-capture sanity checks on the raster.

Sampling a strip for "all near-white" is a heuristic: content that legitimately ends in a
blank section can still pass as truncated-looking, and a truncated capture that happens to
end on content passes as complete.
"""
from loguru import logger

from rasterpdf.capture import BLANK_PIXEL_THRESHOLD, HEIGHT_MISMATCH_TOLERANCE, INTEGRITY_SAMPLE_ROWS
from rasterpdf.exceptions import CaptureTruncated


def is_blank(image, blank_threshold=BLANK_PIXEL_THRESHOLD):
    """True when no pixel has any RGB channel below `blank_threshold`."""
    if image.width == 0 or image.height == 0:
        return True
    extrema = image.convert('RGB').getextrema()
    return all(low >= blank_threshold for low, _high in extrema)


def has_visible_content(image, sample_size=100, blank_threshold=BLANK_PIXEL_THRESHOLD):
    sample = image.crop((0, 0, min(sample_size, image.width), min(sample_size, image.height)))
    return not is_blank(sample, blank_threshold)


def check_capture_integrity(image,
                            expected_height,
                            tolerance=HEIGHT_MISMATCH_TOLERANCE,
                            sample_rows=INTEGRITY_SAMPLE_ROWS,
                            blank_threshold=BLANK_PIXEL_THRESHOLD):
    """
    Compare the raster height with what the measurement promised.

    Raises CaptureTruncated when the raster is short by more than `tolerance` and its bottom
    `sample_rows` rows are blank, any other deviation is only logged.
    """
    if expected_height <= 0:
        return

    difference = abs(image.height - expected_height) / expected_height
    if difference <= tolerance:
        logger.debug(f"Canvas height matches expected height (difference: {difference * 100:.1f}%)")
        return

    logger.warning(f"Canvas height mismatch! Expected: {expected_height}px, Got: {image.height}px ({difference * 100:.1f}% difference)")

    top = max(0, image.height - sample_rows)
    bottom_strip = image.crop((0, top, image.width, image.height))
    if image.height < expected_height and is_blank(bottom_strip, blank_threshold):
        raise CaptureTruncated(canvas_height=image.height, expected_height=expected_height)

    logger.warning("Bottom of the capture has content, continuing with the height mismatch")
