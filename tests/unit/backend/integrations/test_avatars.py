"""
Unit Tests for Avatar Storage.

Format detection runs real Pillow on generated images; files go to tmp_path.
"""

import io

import pytest
from PIL import Image

from snack.backend.integrations.avatars import AvatarStore, detect_image_format

BASE_URL = "https://snack.xyz/media/avatars"


def _image_bytes(format_name: str) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format=format_name)
    return buffer.getvalue()


@pytest.fixture
def store(tmp_path):
    return AvatarStore(directory=tmp_path, base_url=f"{BASE_URL}/")


class TestDetectImageFormat:
    @pytest.mark.parametrize("format_name", ["PNG", "JPEG", "GIF", "WEBP"])
    def test_supported_formats(self, format_name):
        assert detect_image_format(_image_bytes(format_name)) == format_name

    @pytest.mark.parametrize("data", [b"", b"not an image", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16])
    def test_unreadable_data(self, data):
        assert detect_image_format(data) is None


class TestAvatarStore:
    @pytest.mark.asyncio
    async def test_save_writes_file_under_user_folder(self, store, tmp_path):
        url = await store.save("user-1", b"png-bytes", "png")

        assert url.startswith(f"{BASE_URL}/user-1/")
        assert url.endswith(".png")
        saved = list((tmp_path / "user-1").iterdir())
        assert [path.read_bytes() for path in saved] == [b"png-bytes"]

    @pytest.mark.asyncio
    async def test_each_upload_gets_a_new_url(self, store):
        first = await store.save("user-1", b"a", "png")
        second = await store.save("user-1", b"b", "png")

        assert first != second

    @pytest.mark.asyncio
    async def test_delete_removes_own_file(self, store, tmp_path):
        url = await store.save("user-1", b"a", "gif")

        assert await store.delete(url) is True
        assert list((tmp_path / "user-1").iterdir()) == []

    @pytest.mark.asyncio
    async def test_delete_of_missing_file_is_quiet(self, store):
        assert await store.delete(f"{BASE_URL}/user-1/gone.png") is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", [
        None,
        "",
        "https://cdn.example.com/avatar.png",
        f"{BASE_URL}-other/user-1/a.png",
    ])
    async def test_foreign_urls_left_alone(self, store, url):
        assert await store.delete(url) is False

    @pytest.mark.asyncio
    async def test_path_traversal_refused(self, store, tmp_path):
        outside = tmp_path.parent / "keep.txt"
        outside.write_text("keep")

        assert await store.delete(f"{BASE_URL}/../keep.txt") is False
        assert outside.exists()
