"""
Browser-free stand-ins for a Playwright page and element.

The JS resources are never executed here, the fakes recognise which one is being evaluated
and answer the way Chromium would for a simple document.
"""
import copy
import io

from PIL import Image

from rasterpdf.capture import COLLECT_CONSTRAINTS_JS, APPLY_STYLES_JS, VISIBLE_HEIGHT_JS, MEASURE_TARGET_JS, \
    WAIT_FOR_IMAGES_JS, SETTLE_LAYOUT_JS, TRANSLATE_WINDOW_JS, RESTORE_WINDOW_JS, PRINT_CLONE_JS

CONTENT_COLOUR = (40, 40, 40)
WHITE = (255, 255, 255)


def png_bytes(width, height, colour=CONTENT_COLOUR):
    with Image.new('RGB', (width, height), colour) as img:
        buf = io.BytesIO()
        img.save(buf, format='PNG')
        return buf.getvalue()


def node(node_id, relation, computed=None, inline=None, tag='div'):
    base = {'max-height': 'none', 'height': 'auto', 'overflow': 'visible', 'overflow-x': 'visible',
            'overflow-y': 'visible', 'position': 'static', 'width': '800px', 'max-width': 'none'}
    base.update(computed or {})
    return {'node_id': node_id, 'relation': relation, 'tag': tag, 'computed': base, 'inline': dict(inline or {})}


def default_nodes():
    """Target inside a scrolling, relatively positioned preview pane with one clipped child."""
    return [
        node('n0', 'self', computed={'max-height': '600px', 'overflow': 'auto', 'overflow-y': 'auto', 'overflow-x': 'auto'},
             inline={'max-height': '600px'}),
        node('n1', 'descendant', computed={'overflow-y': 'hidden', 'max-height': '200px'}),
        node('n2', 'descendant'),
        node('n3', 'ancestor', computed={'overflow': 'hidden', 'overflow-y': 'hidden', 'overflow-x': 'hidden', 'position': 'relative'},
             inline={'position': 'relative', 'height': '700px'}),
        node('n4', 'ancestor'),
    ]


def default_geometry(width=800, full_height=5000, **insets):
    geometry = {
        'x': 0, 'y': 0,
        'width': width,
        'scroll_height': full_height,
        'offset_height': full_height,
        'rect_height': full_height,
        'max_bottom': full_height - 10,
        'padding_left': 0, 'padding_right': 0,
        'margin_left': 0, 'margin_right': 0,
        'border_left': 0, 'border_right': 0,
    }
    geometry.update(insets)
    return geometry


class FakeElement:
    def __init__(self, page):
        self.page = page
        self.style = {'transform': '', 'position': '', 'top': ''}
        self.translate_history = []

    async def evaluate(self, script, arg=None):
        page = self.page
        if script is COLLECT_CONSTRAINTS_JS:
            page.tagged = True
            return copy.deepcopy(page.nodes)

        if script is VISIBLE_HEIGHT_JS:
            return page.visible_height

        if script is MEASURE_TARGET_JS:
            page.measured_inline = {n['node_id']: dict(n['inline']) for n in page.nodes}
            return dict(page.geometry)

        if script is WAIT_FOR_IMAGES_JS:
            return 0

        if script is TRANSLATE_WINDOW_JS:
            previous = dict(self.style)
            self.style['position'] = 'relative'
            self.style['transform'] = f'translateY(-{arg}px)'
            self.translate_history.append(arg)
            return previous

        if script is RESTORE_WINDOW_JS:
            self.style.update(arg)
            return None

        if script is PRINT_CLONE_JS:
            return {'html': '<div id="cv-preview-content">Jane Doe</div>', 'styles': ['.cv { color: red; }'],
                    'skipped': ['https://cdn.example.com/x.css'], 'font_family': 'Georgia'}

        raise AssertionError(f"Unexpected script evaluated on element: {script[:60]}")


class FakePage:
    """
    :param device_pixel_scale: what the fake context renders screenshots at
    :param max_screenshot_height: device pixels, taller screenshots come back cut to this and blank
    """

    def __init__(self, nodes=None, geometry=None, visible_height=600, device_pixel_scale=2,
                 element_id='cv-preview-content', max_screenshot_height=None, screenshot_payload=None):
        self.nodes = nodes if nodes is not None else default_nodes()
        self.geometry = geometry or default_geometry()
        self.visible_height = visible_height
        self.device_pixel_scale = device_pixel_scale
        self.element_id = element_id
        self.max_screenshot_height = max_screenshot_height
        self.screenshot_payload = screenshot_payload
        self.element = FakeElement(self)
        self.tagged = False
        self.measured_inline = None
        self.screenshots = []
        self.settle_calls = 0
        self.context = FakeContext()

    def inline_styles(self):
        return {n['node_id']: dict(n['inline']) for n in self.nodes}

    async def query_selector(self, selector):
        if selector == f'[id="{self.element_id}"]':
            return self.element
        return None

    async def evaluate(self, script, arg=None):
        if script is APPLY_STYLES_JS:
            by_id = {n['node_id']: n for n in self.nodes}
            applied = 0
            for record in arg['records']:
                target = by_id.get(record['node_id'])
                if target is None:
                    continue
                for prop, value in record['styles'].items():
                    if value in ('', None):
                        target['inline'].pop(prop, None)
                    else:
                        target['inline'][prop] = value
                applied += 1
            if arg['release']:
                self.tagged = False
            return applied

        if script is SETTLE_LAYOUT_JS:
            self.settle_calls += 1
            return True

        raise AssertionError(f"Unexpected script evaluated on page: {script[:60]}")

    async def screenshot(self, type='png', clip=None, full_page=False, animations=None):
        self.screenshots.append({'clip': dict(clip), 'transform': self.element.style['transform']})
        if self.screenshot_payload is not None:
            return self.screenshot_payload

        width = int(clip['width'] * self.device_pixel_scale)
        height = int(clip['height'] * self.device_pixel_scale)
        if self.max_screenshot_height and height > self.max_screenshot_height:
            # What a capture that hit the canvas limit looks like, cut short with nothing at the bottom
            with Image.new('RGB', (width, self.max_screenshot_height), WHITE) as img:
                img.paste(CONTENT_COLOUR, (0, 0, width, self.max_screenshot_height // 2))
                buf = io.BytesIO()
                img.save(buf, format='PNG')
                return buf.getvalue()

        # Shade each capture by its window so stitching order can be checked
        shade = min(200, 20 + len(self.screenshots) * 30)
        return png_bytes(width, height, (shade, shade, shade))


class FakePrintPage:
    def __init__(self, pdf_error=None):
        self.html = None
        self.pdf_kwargs = None
        self.pdf_error = pdf_error
        self.closed = False

    async def set_content(self, html, wait_until=None):
        self.html = html

    async def query_selector(self, selector):
        return FakePrintContent()

    async def evaluate(self, script, arg=None):
        if script is SETTLE_LAYOUT_JS:
            return True
        # scrollHeight of the print content
        return 1200

    async def pdf(self, **kwargs):
        self.pdf_kwargs = kwargs
        if self.pdf_error:
            raise self.pdf_error
        return b'%PDF-1.4 printed'

    async def close(self):
        self.closed = True


class FakePrintContent:
    async def evaluate(self, script, arg=None):
        assert script is WAIT_FOR_IMAGES_JS
        return 0


class FakeContext:
    def __init__(self, new_page_error=None, pdf_error=None):
        self.new_page_error = new_page_error
        self.pdf_error = pdf_error
        self.pages = []

    async def new_page(self):
        if self.new_page_error:
            raise self.new_page_error
        page = FakePrintPage(pdf_error=self.pdf_error)
        self.pages.append(page)
        return page
