"""
Tests for the texture canvas builder.
"""

import sys
import unittest
from pathlib import Path

from PIL import Image

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from silhouette_to_mesh.texture import build_texture


class TestBuildTexture(unittest.TestCase):
    """Test pasting a piece onto the square canvas."""

    def setUp(self):
        self.wide = Image.new('RGBA', (100, 50), (255, 0, 0, 255))

    def test_canvas_size_and_mode(self):
        texture = build_texture(self.wide, 64)
        self.assertEqual(texture.size, (64, 64))
        self.assertEqual(texture.mode, 'RGBA')

    def test_wide_piece_fills_width(self):
        """Scaled to 64x32 and centered vertically."""
        texture = build_texture(self.wide, 64)
        self.assertEqual(texture.getpixel((32, 32)), (255, 0, 0, 255))
        self.assertEqual(texture.getpixel((1, 32))[3], 255)
        self.assertEqual(texture.getpixel((62, 32))[3], 255)
        # Above and below the piece stays transparent
        self.assertEqual(texture.getpixel((32, 4))[3], 0)
        self.assertEqual(texture.getpixel((32, 60))[3], 0)

    def test_tall_piece_centered_horizontally(self):
        tall = Image.new('RGBA', (20, 80), (0, 255, 0, 255))
        texture = build_texture(tall, 80)
        self.assertEqual(texture.getpixel((40, 40)), (0, 255, 0, 255))
        self.assertEqual(texture.getpixel((5, 40))[3], 0)
        self.assertEqual(texture.getpixel((75, 40))[3], 0)

    def test_margin_shrinks_piece(self):
        texture = build_texture(self.wide, 64, margin=0.25)
        self.assertEqual(texture.getpixel((32, 32))[3], 255)
        self.assertEqual(texture.getpixel((8, 32))[3], 0)
        self.assertEqual(texture.getpixel((56, 32))[3], 0)

    def test_piece_transparency_kept(self):
        piece = Image.new('RGBA', (40, 40), (0, 0, 255, 0))
        texture = build_texture(piece, 40)
        self.assertEqual(texture.getpixel((20, 20))[3], 0)

    def test_rgb_piece_accepted(self):
        piece = Image.new('RGB', (30, 30), (10, 20, 30))
        texture = build_texture(piece, 30)
        self.assertEqual(texture.getpixel((15, 15)), (10, 20, 30, 255))

    def test_empty_piece_gives_blank_canvas(self):
        piece = Image.new('RGBA', (0, 0))
        texture = build_texture(piece, 16)
        self.assertEqual(texture.size, (16, 16))
        self.assertIsNone(texture.getbbox())


if __name__ == '__main__':
    unittest.main()
