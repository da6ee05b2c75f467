"""
Team image upload helpers: type and size checks, spooling, data-URI encoding.
"""
import base64
import os
import tempfile

from core.errors import InvalidInput

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5 MB
ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/png', 'image/gif'}
ALLOWED_IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif'}
CHUNK_SIZE = 64 * 1024


def validate_image_type(mime_type, filename=None):
    """Raise InvalidInput unless the MIME type (and extension, if given) is an allowed image type."""
    if mime_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidInput('Only image files are allowed (jpeg, png, gif)')
    if filename is not None:
        ext = os.path.splitext(filename)[1].lower()
        if ext not in ALLOWED_IMAGE_EXTENSIONS:
            raise InvalidInput('Only image files are allowed (jpeg, png, gif)')


def validate_image_size(size: int, max_size: int = MAX_IMAGE_SIZE):
    if size > max_size:
        raise InvalidInput(f'Image too large (max {max_size} bytes)')


def spool_upload(stream, upload_dir: str, max_size: int = MAX_IMAGE_SIZE) -> str:
    """
    Copy an upload stream into a temporary file under ``upload_dir``.

    Stops as soon as more than ``max_size`` bytes have been read; the partial
    file is removed before InvalidInput is raised. The caller owns the
    returned path and must delete it.
    """
    os.makedirs(upload_dir, exist_ok=True)
    fd, path = tempfile.mkstemp(prefix='team-', suffix='.upload', dir=upload_dir)
    try:
        written = 0
        with os.fdopen(fd, 'wb') as f:
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                validate_image_size(written, max_size)
                f.write(chunk)
    except BaseException:
        discard(path)
        raise
    return path


def discard(path):
    """Remove a spooled upload if it still exists."""
    if path and os.path.exists(path):
        os.remove(path)


def to_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
