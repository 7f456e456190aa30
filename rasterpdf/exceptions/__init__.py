from loguru import logger


class PdfGenerationError(Exception):
    # Which part of the pipeline gave up, shown to the user together with the cause
    stage = 'generate'
    msg = ''

    def __init__(self, msg=''):
        self.msg = msg
        super().__init__(f"{self.stage}: {msg}")


class TargetNotFound(PdfGenerationError):
    stage = 'lookup'

    def __init__(self, element_id):
        self.element_id = element_id
        super().__init__(f'Element with id "{element_id}" not found. Please ensure the preview is visible.')


class NoDimensions(PdfGenerationError):
    stage = 'measure'

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Component has no dimensions ({width}x{height}px). Please ensure the preview is visible.")


class CaptureTruncated(PdfGenerationError):
    stage = 'capture'

    def __init__(self, canvas_height, expected_height):
        self.canvas_height = canvas_height
        self.expected_height = expected_height
        logger.error(f"Capture appears to be cut off, bottom section is blank. Got {canvas_height}px, expected {expected_height}px")
        super().__init__(f"Content was cut off. Canvas height ({canvas_height}px) is less than expected ({expected_height}px). "
                         f"This may be due to browser canvas size limits.")


class RasterizerUnavailable(PdfGenerationError):
    stage = 'capture'


class InvalidGeometry(PdfGenerationError):
    stage = 'paginate'

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Cropped content area is {width}x{height}px, padding/margins are larger than the captured image")


class EncodingFailure(PdfGenerationError):
    stage = 'paginate'


class PrintWindowBlocked(PdfGenerationError):
    stage = 'print'

    def __init__(self, msg=''):
        super().__init__(f"Failed to open print window. Please allow popups for this site. {msg}".strip())


class PageCountMismatch(PdfGenerationError):
    stage = 'validate'

    def __init__(self, page_count, expected_pages):
        self.page_count = page_count
        self.expected_pages = expected_pages
        super().__init__(f"PDF has {page_count} page(s), exactly {expected_pages} required")


class BrowserConnectError(Exception):
    msg = ''
    def __init__(self, msg):
        self.msg = msg
        logger.error(f"Browser connection error {msg}")
        super().__init__(msg)
