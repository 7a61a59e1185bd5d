"""
Configuration settings related to image staging.

Defines which file extensions are treated as photos and the parameters used
when photos are re-encoded to JPEG.
"""

# --- General Image Settings ---
IMAGE_EXTENSIONS = (
    ".jpg", ".jpeg", ".jpe", ".png", ".heic", ".heif", ".hif", ".tif", ".tiff",
    ".bmp", ".gif", ".webp", ".dng",
)

# --- JPEG Encoder Settings ---
# Quality passed to Pillow's JPEG encoder. 90 keeps re-encoded photos visually
# identical to the source at a fraction of the size of a lossless copy.
JPEG_QUALITY = 90
JPEG_OPTIMIZE = True

# Pillow modes the JPEG encoder writes directly. Everything else is converted
# to RGB before saving.
JPEG_ENCODABLE_MODES = ("RGB", "L", "CMYK")
