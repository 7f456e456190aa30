import io
import math
from dataclasses import dataclass, field

from loguru import logger
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdfcanvas

from rasterpdf.capture import CSS_PX_PER_INCH, MM_PER_INCH, PAGE_WIDTH_MM, PAGE_HEIGHT_MM, DEVICE_PIXEL_SCALE
from rasterpdf.capture.model import PageBand
from rasterpdf.exceptions import InvalidGeometry, EncodingFailure

PDF_SUBJECT = "Curriculum Vitae"
PDF_AUTHOR = "ARMS CV Generator"
PDF_CREATOR = "ARMS System"


@dataclass
class PaginatedDocument:
    pdf_bytes: bytes
    page_count: int
    image_width_mm: float
    image_height_mm: float
    bands: list = field(default_factory=list)


def pixels_per_mm(device_pixel_scale):
    # scale 2 means 192 DPI
    return (CSS_PX_PER_INCH * device_pixel_scale) / MM_PER_INCH


def crop_to_content(image, insets, device_pixel_scale=DEVICE_PIXEL_SCALE):
    """Cut the target's horizontal padding, margin and border off the raster."""
    content_start_x = round(insets.left * device_pixel_scale)
    content_width = image.width - content_start_x - round(insets.right * device_pixel_scale)
    content_height = image.height

    if content_width <= 0 or content_height <= 0:
        raise InvalidGeometry(width=content_width, height=content_height)

    logger.debug(f"Content area in canvas: x={content_start_x}px, width={content_width}px")
    return image.crop((content_start_x, 0, content_start_x + content_width, content_height))


def plan_page_bands(width_px, height_px, device_pixel_scale=DEVICE_PIXEL_SCALE,
                    page_width_mm=PAGE_WIDTH_MM, page_height_mm=PAGE_HEIGHT_MM):
    """
    Scale the content to the full page width and slice it into page-height bands.

    :return: (image_width_mm, image_height_mm, [PageBand, ...]) top to bottom, bands never overlap
    """
    if width_px <= 0 or height_px <= 0:
        raise InvalidGeometry(width=width_px, height=height_px)

    px_per_mm = pixels_per_mm(device_pixel_scale)
    width_mm = width_px / px_per_mm
    height_mm = height_px / px_per_mm

    # No margins, the content fills the page width edge to edge
    scale_factor = page_width_mm / width_mm
    image_width_mm = page_width_mm
    image_height_mm = height_mm * scale_factor

    # The epsilon keeps float noise on exact multiples from adding an empty trailing page
    total_pages = max(1, math.ceil(image_height_mm / page_height_mm - 1e-9))
    logger.debug(f"Scaled image: {image_width_mm}x{image_height_mm:.2f}mm (scale factor {scale_factor:.3f}), pages needed: {total_pages}")

    # Band edges come from the exact rows-per-page ratio so neighbouring bands share an edge and never overlap.
    # Flooring keeps every edge below height_px, the last band always gets at least one row
    rows_per_page = height_px * page_height_mm / image_height_mm
    edges = [min(math.floor(page * rows_per_page), height_px - 1) for page in range(total_pages)] + [height_px]

    bands = []
    for page in range(total_pages):
        source_y = edges[page]
        source_height = edges[page + 1] - source_y
        dest_height = min(page_height_mm, image_height_mm - page * page_height_mm)
        bands.append(PageBand(source_y=source_y, source_height_px=source_height, dest_height_mm=dest_height))

    return image_width_mm, image_height_mm, bands


def _embeddable(tile):
    try:
        buf = io.BytesIO()
        tile.save(buf, format='PNG')
        buf.seek(0)
        return ImageReader(buf)
    except (OSError, ValueError) as e:
        raise EncodingFailure(f"Could not encode page image: {e}") from e


def paginate(image,
             device_pixel_scale=DEVICE_PIXEL_SCALE,
             page_width_mm=PAGE_WIDTH_MM,
             page_height_mm=PAGE_HEIGHT_MM,
             title=None,
             subject=PDF_SUBJECT,
             author=PDF_AUTHOR,
             creator=PDF_CREATOR):
    """
    Lay a (cropped) raster out over as many fixed-size PDF pages as it needs.

    Every page gets one band placed at the top-left corner at full page width, the last page
    is only as tall as what is left so it is never stretched.
    """
    image_width_mm, image_height_mm, bands = plan_page_bands(image.width, image.height, device_pixel_scale,
                                                             page_width_mm, page_height_mm)

    output = io.BytesIO()
    pdf = pdfcanvas.Canvas(output, pagesize=(page_width_mm * mm, page_height_mm * mm), pageCompression=1)
    if title:
        pdf.setTitle(title)
    pdf.setSubject(subject)
    pdf.setAuthor(author)
    pdf.setCreator(creator)

    for n, band in enumerate(bands, start=1):
        tile = image.crop((0, band.source_y, image.width, band.source_y + band.source_height_px))
        with tile:
            reader = _embeddable(tile)
        # ReportLab measures from the bottom of the page
        y = (page_height_mm - band.dest_height_mm) * mm
        pdf.drawImage(reader, 0, y, width=image_width_mm * mm, height=band.dest_height_mm * mm)
        pdf.showPage()
        logger.debug(f"Added page {n}/{len(bands)}: sourceY={band.source_y}px, sourceHeight={band.source_height_px}px, "
                     f"{image_width_mm}mm x {band.dest_height_mm:.2f}mm")

    pdf.save()
    return PaginatedDocument(pdf_bytes=output.getvalue(),
                             page_count=len(bands),
                             image_width_mm=image_width_mm,
                             image_height_mm=image_height_mm,
                             bands=bands)
