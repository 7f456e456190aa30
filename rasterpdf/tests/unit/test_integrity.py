#!/usr/bin/env python3

# run from dir above rasterpdf/ dir
# python3 -m unittest rasterpdf.tests.unit.test_integrity

import unittest

from PIL import Image

from rasterpdf.capture.integrity import check_capture_integrity, is_blank, has_visible_content
from rasterpdf.exceptions import CaptureTruncated, PdfGenerationError


class TestCaptureIntegrity(unittest.TestCase):

    def test_short_capture_with_blank_bottom_is_fatal(self):
        # 80% of what was expected, content at the top and nothing at the bottom
        with Image.new('RGB', (100, 800), 'white') as image:
            image.paste((0, 0, 0), (0, 0, 100, 300))
            with self.assertRaises(CaptureTruncated) as cm:
                check_capture_integrity(image, expected_height=1000)

        self.assertEqual(cm.exception.canvas_height, 800)
        self.assertEqual(cm.exception.expected_height, 1000)
        self.assertIsInstance(cm.exception, PdfGenerationError)
        self.assertIn('cut off', str(cm.exception))
        self.assertTrue(str(cm.exception).startswith('capture:'))

    def test_one_dark_pixel_at_the_bottom_passes(self):
        with Image.new('RGB', (100, 800), 'white') as image:
            image.putpixel((50, 750), (0, 0, 0))
            check_capture_integrity(image, expected_height=1000)

    def test_within_tolerance_passes_even_if_blank(self):
        with Image.new('RGB', (100, 960), 'white') as image:
            check_capture_integrity(image, expected_height=1000)

    def test_taller_than_expected_only_warns(self):
        with Image.new('RGB', (100, 1200), 'white') as image:
            check_capture_integrity(image, expected_height=1000)

    def test_near_white_counts_as_blank(self):
        with Image.new('RGB', (10, 10), (251, 252, 255)) as image:
            self.assertTrue(is_blank(image))
        with Image.new('RGB', (10, 10), (249, 255, 255)) as image:
            self.assertFalse(is_blank(image))

    def test_threshold_is_configurable(self):
        with Image.new('RGB', (100, 500), (200, 200, 200)) as image:
            check_capture_integrity(image, expected_height=1000, blank_threshold=250)
            with self.assertRaises(CaptureTruncated):
                check_capture_integrity(image, expected_height=1000, blank_threshold=150)

    def test_visible_content_sampled_from_top_left(self):
        with Image.new('RGB', (300, 300), 'white') as image:
            self.assertFalse(has_visible_content(image))
            image.putpixel((250, 250), (0, 0, 0))
            self.assertFalse(has_visible_content(image))
            image.putpixel((10, 10), (0, 0, 0))
            self.assertTrue(has_visible_content(image))

    def test_rgba_and_greyscale_images(self):
        with Image.new('L', (10, 10), 0) as image:
            self.assertFalse(is_blank(image))
        with Image.new('RGBA', (10, 10), (255, 255, 255, 0)) as image:
            self.assertTrue(is_blank(image))


if __name__ == '__main__':
    unittest.main()
