import io
import logging

import numpy as np
from PIL import Image

from bytewise import reconstruct_units, require_byte_scheme, share_units, to_bytes
from sss_errors import CorruptShareError, DimensionMismatchError

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def to_grayscale(pixels):
    """
    Convert a pixel buffer to one luminance byte per pixel.

    Args:
        pixels: PIL Image or array shaped (height, width) for grayscale data,
            or (height, width, channels) with RGB or RGBA channels

    Returns:
        uint8 array shaped (height, width)
    """
    img_array = np.asarray(pixels)

    if img_array.ndim == 2:
        gray = img_array.astype(np.float64)
    elif img_array.ndim == 3 and img_array.shape[2] >= 3:
        rgb = img_array[:, :, :3].astype(np.float64)  # Alpha is ignored
        r_w, g_w, b_w = LUMA_WEIGHTS
        gray = r_w * rgb[:, :, 0] + g_w * rgb[:, :, 1] + b_w * rgb[:, :, 2]
    elif img_array.ndim == 3 and img_array.shape[2] in (1, 2):
        gray = img_array[:, :, 0].astype(np.float64)  # L or LA
    else:
        raise ValueError(f"Unsupported pixel buffer shape {img_array.shape}")

    # Round half up, then clamp into the byte range
    return np.clip(np.floor(gray + 0.5), 0, 255).astype(np.uint8)


def share_image(image, scheme, rng=None, progress_callback=None, should_cancel=None):
    """
    Convert an image to Shamir's Secret Sharing shares, one share set per pixel

    Args:
        image: PIL Image or pixel array (see to_grayscale)
        scheme: ThresholdScheme to use for every pixel
        rng: Random source for polynomial coefficients
        progress_callback: Function to call with progress updates (0.0-1.0)
        should_cancel: Function returning True to abort the operation

    Returns:
        tuple: (secret_shares, width, height)
            - secret_shares: List of share lists in row-major pixel order
    """
    require_byte_scheme(scheme)
    gray = to_grayscale(image)
    height, width = gray.shape

    logger.info("Sharing %dx%d image (%d pixels)", width, height, width * height)
    secret_shares = share_units(
        gray.reshape(-1).tolist(), scheme, rng,
        progress_callback=progress_callback,
        should_cancel=should_cancel,
    )
    return secret_shares, width, height


def reconstruct_image(secret_shares, width, height, scheme, progress_callback=None,
                      should_cancel=None):
    """
    Reconstruct a grayscale image from its per-pixel shares

    Args:
        secret_shares: List of share lists in row-major pixel order
        width: Image width in pixels
        height: Image height in pixels
        scheme: ThresholdScheme used when the image was shared

    Returns:
        uint8 array shaped (height, width, 4) with R=G=B=gray and opaque alpha
    """
    require_byte_scheme(scheme)
    if width < 0 or height < 0 or len(secret_shares) != width * height:
        raise DimensionMismatchError(
            f"Got {len(secret_shares)} pixels for a {width}x{height} image"
        )

    values = reconstruct_units(
        secret_shares, scheme,
        progress_callback=progress_callback,
        should_cancel=should_cancel,
    )
    try:
        to_bytes(values)
    except CorruptShareError as exc:
        raise CorruptShareError(
            f"Pixel {exc.unit_index} is not a valid gray level", unit_index=exc.unit_index
        ) from exc

    gray = np.array(values, dtype=np.uint8).reshape(height, width)
    reconstructed = np.empty((height, width, 4), dtype=np.uint8)
    reconstructed[:, :, :3] = gray[:, :, np.newaxis]
    reconstructed[:, :, 3] = 255
    return reconstructed


def load_image(source):
    """Open an image file (path or file object) as an RGBA PIL Image."""
    with Image.open(source) as image:
        return image.convert("RGBA")


def pixels_to_image(pixels):
    """Wrap an RGBA pixel array in a PIL Image."""
    return Image.fromarray(np.asarray(pixels, dtype=np.uint8))


def create_preview_image(secret_shares, width, height, x):
    """
    Create a preview image from the share values of participant ``x``

    Share values are field elements, so they are folded into 0-255 for display.
    The preview is noise to anyone holding fewer than threshold shares.
    """
    if len(secret_shares) != width * height:
        raise DimensionMismatchError(
            f"Got {len(secret_shares)} pixels for a {width}x{height} image"
        )

    img_array = np.zeros(width * height, dtype=np.uint8)
    for pixel_idx, shares in enumerate(secret_shares):
        for share_x, share_y in shares:
            if share_x == x:
                img_array[pixel_idx] = share_y % 256
                break

    return Image.fromarray(img_array.reshape(height, width))


def image_to_png_bytes(image):
    """Encode a PIL Image as PNG bytes, ready for download."""
    img_byte_arr = io.BytesIO()
    image.save(img_byte_arr, format="PNG")
    return img_byte_arr.getvalue()
