"""
Image normalization for the recognition service.

Decodes an uploaded image, bounds its size, corrects brightness/contrast and
re-encodes it as JPEG. This runs before any network call, so a bad upload is
rejected without touching the recognition provider.
"""

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from food_tracker_api.models.analysis import NormalizedImage

logger = logging.getLogger(__name__)


class ImageNormalizationError(Exception):
    """Error while decoding or re-encoding an image."""

    def __init__(self, message: str, invalid_input: bool = True):
        super().__init__(message)
        self.message = message
        # True when the upload itself is unusable (client error)
        self.invalid_input = invalid_input


class ImageNormalizer:
    """Fit images inside a square bound and re-encode them at fixed quality."""

    def __init__(self, max_dimension: int = 768, quality: int = 80):
        """
        Initialize normalizer.

        Args:
            max_dimension: Longest allowed side in pixels, applied to both axes
            quality: JPEG quality (1-95)
        """
        if max_dimension <= 0:
            raise ValueError("max_dimension must be positive")
        if not 1 <= quality <= 95:
            raise ValueError("quality must be between 1 and 95")
        self.max_dimension = max_dimension
        self.quality = quality

    def normalize(self, image_data: bytes) -> NormalizedImage:
        """
        Normalize raw upload bytes.

        Args:
            image_data: Bytes claimed to be an image (JPEG, PNG, WebP, ...)

        Returns:
            NormalizedImage no larger than max_dimension on either axis

        Raises:
            ImageNormalizationError: invalid_input=True for empty, corrupt,
                truncated or unsupported input; False if re-encoding failed
        """
        if not image_data:
            raise ImageNormalizationError("Input buffer is empty")

        image = self._decode(image_data)

        # Orientation first so the bound applies to the displayed axes
        image = ImageOps.exif_transpose(image)
        if image.mode != "RGB":
            image = image.convert("RGB")

        # thumbnail() keeps the aspect ratio and never enlarges
        image.thumbnail((self.max_dimension, self.max_dimension), Image.Resampling.LANCZOS)
        image = ImageOps.autocontrast(image, cutoff=1)

        encoded = self._encode(image)

        logger.debug(
            "Normalized image",
            extra={
                "source_bytes": len(image_data),
                "output_bytes": len(encoded),
                "width": image.width,
                "height": image.height,
            },
        )

        return NormalizedImage(
            data=encoded,
            width=image.width,
            height=image.height,
            source_size=len(image_data),
        )

    def _decode(self, image_data: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(image_data))
            # Force a full decode; open() only reads the header
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise ImageNormalizationError(f"Unsupported image format: {e}") from e
        except (OSError, ValueError, SyntaxError) as e:
            raise ImageNormalizationError(f"Corrupt image data: {e}") from e
        return image

    def _encode(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        try:
            image.save(buffer, format="JPEG", quality=self.quality, optimize=True)
        except (OSError, ValueError) as e:
            raise ImageNormalizationError(
                f"Failed to encode image: {e}", invalid_input=False
            ) from e

        encoded = buffer.getvalue()
        if not encoded:
            raise ImageNormalizationError("Encoder produced no data", invalid_input=False)
        return encoded
