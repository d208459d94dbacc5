"""
Texture canvas for the front and back faces.

The mesh uses a planar UV mapping uv = (x + 0.5, y + 0.5) on an outline
whose larger dimension is 1.0. So the texture must contain the piece
scaled to fill the canvas along its larger dimension, centered on both
axes. Anything else and the photo slides off the silhouette!
"""

from PIL import Image


def build_texture(piece_image: Image.Image, size: int, margin: float = 0.0) -> Image.Image:
    """
    Paste a piece cut-out centered on a transparent square canvas.

    Args:
        piece_image: RGBA cut-out of the piece (any size)
        size: Side length of the square canvas in pixels
        margin: Empty border as a fraction of the canvas size

    Returns:
        A size x size RGBA image
    """
    canvas = Image.new('RGBA', (size, size), (0, 0, 0, 0))

    width, height = piece_image.size
    if width == 0 or height == 0:
        return canvas

    scale = size * (1 - margin * 2) / max(width, height)
    scaled_width = max(1, round(width * scale))
    scaled_height = max(1, round(height * scale))
    scaled = piece_image.convert('RGBA').resize((scaled_width, scaled_height), Image.LANCZOS)

    offset = ((size - scaled_width) // 2, (size - scaled_height) // 2)
    canvas.paste(scaled, offset, scaled)
    return canvas
