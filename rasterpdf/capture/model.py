"""
Transient values passed between the capture and pagination stages.

Nothing here outlives a single generation request; the raster itself is a plain
`PIL.Image.Image` and is not wrapped.
"""
import math
from dataclasses import dataclass, field


@dataclass
class Insets:
    """Horizontal structural insets of the captured node, in CSS pixels."""
    padding_left: float = 0
    padding_right: float = 0
    margin_left: float = 0
    margin_right: float = 0
    border_left: float = 0
    border_right: float = 0

    @property
    def left(self):
        return self.padding_left + self.margin_left + self.border_left

    @property
    def right(self):
        return self.padding_right + self.margin_right + self.border_right


@dataclass
class CaptureTarget:
    x: float
    y: float
    width: int
    full_height: int
    visible_height: float = 0
    device_pixel_scale: int = 2
    insets: Insets = field(default_factory=Insets)

    def __post_init__(self):
        # The full content height always dominates whatever was visible through a clipping container
        if self.full_height < self.visible_height:
            self.full_height = math.ceil(self.visible_height)

    @property
    def expected_raster_width(self):
        return self.width * self.device_pixel_scale

    @property
    def expected_raster_height(self):
        return self.full_height * self.device_pixel_scale


@dataclass(frozen=True)
class ChunkWindow:
    start_offset_px: int
    height_px: int

    @property
    def end_offset_px(self):
        return self.start_offset_px + self.height_px


@dataclass(frozen=True)
class PageBand:
    source_y: int
    source_height_px: int
    dest_height_mm: float
