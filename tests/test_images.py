"""
Tests for image upload helpers.
"""
import base64
import io
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.errors import InvalidInput
from core.images import (
    validate_image_type,
    validate_image_size,
    spool_upload,
    discard,
    to_data_uri,
    MAX_IMAGE_SIZE,
)


class TestValidation:
    """Tests for type and size checks."""

    @pytest.mark.parametrize('mime_type,filename', [
        ('image/jpeg', 'a.jpg'),
        ('image/jpeg', 'a.JPEG'),
        ('image/png', 'logo.png'),
        ('image/gif', 'anim.gif'),
    ])
    def test_allowed(self, mime_type, filename):
        validate_image_type(mime_type, filename)

    @pytest.mark.parametrize('mime_type,filename', [
        ('image/svg+xml', 'logo.svg'),
        ('text/plain', 'notes.txt'),
        ('image/png', 'logo.txt'),
        ('application/octet-stream', 'logo.png'),
    ])
    def test_rejected(self, mime_type, filename):
        with pytest.raises(InvalidInput):
            validate_image_type(mime_type, filename)

    def test_size_limit(self):
        validate_image_size(MAX_IMAGE_SIZE)
        with pytest.raises(InvalidInput):
            validate_image_size(MAX_IMAGE_SIZE + 1)


class TestSpoolUpload:
    """Tests for spooling uploads to temporary files."""

    def test_spools_content(self, uploads_dir):
        path = spool_upload(io.BytesIO(b'hello'), str(uploads_dir))
        try:
            with open(path, 'rb') as f:
                assert f.read() == b'hello'
        finally:
            discard(path)
        assert os.listdir(uploads_dir) == []

    def test_oversize_removes_partial_file(self, uploads_dir):
        stream = io.BytesIO(b'x' * 2048)
        with pytest.raises(InvalidInput):
            spool_upload(stream, str(uploads_dir), max_size=1024)
        assert os.listdir(uploads_dir) == []

    def test_discard_missing_path_is_noop(self, uploads_dir):
        discard(None)
        discard(str(uploads_dir / 'gone.upload'))


def test_to_data_uri():
    uri = to_data_uri(b'\x00\x01\x02', 'image/gif')
    prefix, payload = uri.split(',', 1)
    assert prefix == 'data:image/gif;base64'
    assert base64.b64decode(payload) == b'\x00\x01\x02'
