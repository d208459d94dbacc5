"""
Configuration constants for silhouette to mesh conversion.

All the magic numbers live here! Want to change your defaults?
Just edit these values and every conversion picks up the new settings.
"""

__version__ = "1.0.0"

# ============================================================================
# Extrusion
# ============================================================================

# Total thickness of the solid along the extrusion (z) axis.
# Outlines are normalized so the larger dimension is 1.0, so this is
# 5% of the object's width or height.
THICKNESS = 0.05

# Number of ring transitions between the front and back face.
# 3 transitions = front ring, 2 intermediate bevel rings, back ring
EDGE_DIVISIONS = 3

# The bevel follows an oval profile: half-depth along z, half-width along
# the outward miter direction. Both are fractions of the thickness.
# 0.5 / 0.25 = the oval is twice as deep as it is wide (a soft rim)
BEVEL_DEPTH_RATIO = 0.5
BEVEL_WIDTH_RATIO = 0.25

# Below this |sin| the two edges at a vertex are treated as collinear and
# the miter falls back to the edge normal instead of the bisector
MITER_EPSILON = 1e-9

# Planar UV mapping: uv = (x + UV_OFFSET, y + UV_OFFSET)
# Outlines are centered on the origin with extent 1.0, so this maps them
# onto the [0, 1] texture square
UV_OFFSET = 0.5

# ============================================================================
# Materials
# ============================================================================

# Textured material for the front and back faces (material group 0)
FACE_METALNESS = 0.5
FACE_ROUGHNESS = 0.5

# Untextured material for the beveled rim (material group 1)
EDGE_METALNESS = 0.6
EDGE_ROUGHNESS = 0.3
EDGE_COLOR = (0xAA, 0xAA, 0xAA)

# ============================================================================
# Piece Detection
# ============================================================================

# Contours with fewer points than this are noise (specks, text, scratches)
CONTOUR_COMPLEXITY_THRESHOLD = 20

# Bounding boxes must be larger than this in BOTH dimensions
MIN_BOX_SIZE_PX = 50

# Gaussian blur radius applied to the silhouette mask so the texture edge
# fades out softly instead of showing jagged contour pixels
MASK_BLUR_RADIUS_PX = 3

# A piece whose bounding box origin lies further than this fraction of the
# image half-size from the center is considered to touch the image border
# (the photo frame itself shows up as a contour too)
CENTER_TOLERANCE = 0.95

# ============================================================================
# Outline
# ============================================================================

# Keep every Nth contour point. Raw contours have hundreds of points and the
# triangulator is O(n^3), so we decimate before meshing
POINT_DECIMATION_STEP = 32

# ============================================================================
# Texture
# ============================================================================

# Side length of the square texture canvas in pixels
TEXTURE_SIZE_PX = 512

# Empty margin around the piece inside the texture, as a fraction of size.
# Must stay 0.0 for the planar UV mapping to line up with the outline
TEXTURE_MARGIN = 0.0

# ============================================================================
# Output
# ============================================================================

# If no output file is specified, we'll use: {input_name}_model.{format}
DEFAULT_OUTPUT_SUFFIX = "_model"

# glb keeps both materials and the embedded texture in one file
DEFAULT_OUTPUT_FORMAT = "glb"
SUPPORTED_OUTPUT_FORMATS = {"glb", "obj", "stl"}

# Supported image file extensions for batch processing
SUPPORTED_IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp'}

# Decimal places used when printing coordinates and sizes
COORDINATE_PRECISION = 4
