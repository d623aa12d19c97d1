"""Constants"""

# pylint: disable=too-few-public-methods
class C:
    """Constants"""
    SEPIA_INTENSITY    = 0.5
    VIGNETTE_INTENSITY = 0.9
    VIGNETTE_RADIUS    = 1.0
    ZOOM_BLUR_AMOUNT   = 20
    ZOOM_BLUR_CROP     = 0.1    # fraction trimmed from each side after the blur
    POSTERIZE_LEVELS   = 6
    HUE_ANGLES         = (90,)
    MAX_RATING         = 5
    DEFAULT_JPEG_QUALITY = 90
    DEFAULT_GET_TIMEOUT  = 10
    IMAGE_EXTENSIONS = set(['.jpg','.jpeg','.png','.bmp','.tif','.tiff','.webp'])
