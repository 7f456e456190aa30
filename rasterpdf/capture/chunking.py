import math

from rasterpdf.capture import MAX_CANVAS_HEIGHT_PX, CHUNK_OVERLAP_PX
from rasterpdf.capture.model import ChunkWindow


def max_logical_height(device_pixel_scale, max_canvas_height_px=MAX_CANVAS_HEIGHT_PX):
    return math.floor(max_canvas_height_px / device_pixel_scale)


def needs_chunking(full_height, device_pixel_scale, max_canvas_height_px=MAX_CANVAS_HEIGHT_PX):
    return full_height * device_pixel_scale > max_canvas_height_px


def plan_chunks(full_height, device_pixel_scale, max_canvas_height_px=MAX_CANVAS_HEIGHT_PX, overlap_px=CHUNK_OVERLAP_PX):
    """
    Split [0, full_height] into capture windows that each stay under the canvas limit.

    Consecutive windows overlap by `overlap_px`, the last one ends exactly at `full_height`.
    When the whole height fits in one pass a single window is returned.
    """
    if full_height <= 0:
        return []

    if not needs_chunking(full_height, device_pixel_scale, max_canvas_height_px):
        return [ChunkWindow(start_offset_px=0, height_px=full_height)]

    window_height = max_logical_height(device_pixel_scale, max_canvas_height_px)
    step = window_height - overlap_px
    if step <= 0:
        raise ValueError(f"Chunk overlap {overlap_px}px leaves nothing to advance by in a {window_height}px window")

    num_chunks = math.ceil(full_height / step)
    windows = []
    for i in range(num_chunks):
        start = i * step
        end = min(start + window_height, full_height)
        windows.append(ChunkWindow(start_offset_px=start, height_px=end - start))

    return windows
