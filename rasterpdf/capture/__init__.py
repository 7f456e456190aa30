import importlib.resources
import os

# Rendering multiplier handed to Chromium as device_scale_factor, 2 gives retina quality output
DEVICE_PIXEL_SCALE = int(os.getenv("RASTERPDF_DEVICE_PIXEL_SCALE", 2))

# Chromium refuses (or silently truncates) screenshots taller than ~32767px, stay well under it.
# At scale 2 this is ~15000px of CSS height per capture pass
MAX_CANVAS_HEIGHT_PX = int(os.getenv("RASTERPDF_MAX_CANVAS_HEIGHT", 30000))

# Chunks share this many CSS pixels with the one before so the stitched image has no seams
CHUNK_OVERLAP_PX = int(os.getenv("RASTERPDF_CHUNK_OVERLAP", 100))

# A pixel counts as content when any channel is below this
BLANK_PIXEL_THRESHOLD = int(os.getenv("RASTERPDF_BLANK_THRESHOLD", 250))

# Allowed relative difference between captured and expected raster height
HEIGHT_MISMATCH_TOLERANCE = float(os.getenv("RASTERPDF_HEIGHT_TOLERANCE", 0.05))
INTEGRITY_SAMPLE_ROWS = int(os.getenv("RASTERPDF_INTEGRITY_SAMPLE_ROWS", 100))

# Upper bounds for the "layout has settled" and "images decoded" waits
LAYOUT_SETTLE_MS = int(os.getenv("RASTERPDF_LAYOUT_SETTLE_MS", 300))
IMAGE_LOAD_TIMEOUT_MS = int(os.getenv("RASTERPDF_IMAGE_LOAD_TIMEOUT_MS", 2000))

# Used while measuring (CSS px at 96 DPI)
CSS_PX_PER_INCH = 96
MM_PER_INCH = 25.4

# A4
PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297

DEFAULT_ELEMENT_ID = "cv-preview-content"


def _res(name):
    return importlib.resources.files("rasterpdf.capture.res").joinpath(name).read_text(encoding='utf-8')


COLLECT_CONSTRAINTS_JS = _res('collect_constraints.js')
APPLY_STYLES_JS = _res('apply_styles.js')
VISIBLE_HEIGHT_JS = _res('visible_height.js')
MEASURE_TARGET_JS = _res('measure_target.js')
WAIT_FOR_IMAGES_JS = _res('wait_for_images.js')
SETTLE_LAYOUT_JS = _res('settle_layout.js')
TRANSLATE_WINDOW_JS = _res('translate_window.js')
RESTORE_WINDOW_JS = _res('restore_window.js')
PRINT_CLONE_JS = _res('print_clone.js')
