"""Tests for the raster transcoder: stored files, dimensions and cleanup."""
import asyncio
import io

import pytest
from PIL import Image as PILImage

from conftest import make_image_bytes
from snapboard.config import config
from snapboard.errors import StorageFailure, ValidationFailure
from snapboard.services import transcode_service
from snapboard.services.transcode_service import TranscodeService, generate_stored_filename, stored_extension


def stored_files(root):
    if not root.exists():
        return []
    return [p for p in root.rglob("*") if p.is_file()]


def dimensions(path):
    with PILImage.open(path) as img:
        return img.size


class TestStoredFilename:
    def test_extension_is_preserved_and_lowercased(self):
        assert stored_extension("Photo.PNG") == ".png"
        assert stored_extension("a.webp") == ".webp"

    def test_missing_or_unknown_extension_defaults_to_jpg(self):
        assert stored_extension("photo") == ".jpg"
        assert stored_extension(None) == ".jpg"
        assert stored_extension("render.php") == ".jpg"

    def test_filename_shape(self):
        name = generate_stored_filename("cat.gif")
        timestamp, _, rest = name.partition("-")
        assert timestamp.isdigit()
        assert rest.endswith(".gif")
        assert len(rest.removesuffix(".gif")) == 16

    def test_same_original_name_never_collides(self):
        names = {generate_stored_filename("same.jpg") for _ in range(200)}
        assert len(names) == 200


class TestTranscode:
    async def test_writes_primary_and_three_thumbnails(self, storage):
        result = await TranscodeService.transcode(make_image_bytes((64, 48)), "photo.jpg")

        assert len(stored_files(storage)) == 4
        assert all(path.exists() for path in result.paths)
        assert result.primary_path == storage / "images" / result.stored_filename
        assert set(result.thumbnail_paths) == {"small", "medium", "large"}
        assert (result.width, result.height) == dimensions(result.primary_path)
        assert result.size_bytes == result.primary_path.stat().st_size
        assert result.mime_type == "image/jpeg"

    async def test_oversized_primary_is_shrunk_preserving_aspect(self, storage, monkeypatch):
        monkeypatch.setattr(config, "MAX_IMAGE_DIMENSION", 200)

        result = await TranscodeService.transcode(make_image_bytes((400, 100)), "wide.jpg")

        assert (result.width, result.height) == (200, 50)
        assert dimensions(result.primary_path) == (200, 50)

    async def test_small_primary_is_not_upscaled(self, storage):
        result = await TranscodeService.transcode(make_image_bytes((30, 20)), "tiny.jpg")

        assert (result.width, result.height) == (30, 20)

    @pytest.mark.parametrize("source_size", [(1000, 500), (120, 600), (64, 48)])
    async def test_small_thumbnail_is_exact_cover_crop(self, storage, source_size):
        result = await TranscodeService.transcode(make_image_bytes(source_size), "x.jpg")

        assert dimensions(result.thumbnail_paths["small"]) == config.THUMBNAIL_SMALL

    async def test_medium_and_large_fit_inside_their_boxes(self, storage):
        result = await TranscodeService.transcode(make_image_bytes((1000, 500)), "x.jpg")

        assert dimensions(result.thumbnail_paths["medium"]) == (400, 200)
        assert dimensions(result.thumbnail_paths["large"]) == (800, 400)

    async def test_medium_and_large_are_never_upscaled(self, storage):
        result = await TranscodeService.transcode(make_image_bytes((64, 48)), "x.jpg")

        assert dimensions(result.thumbnail_paths["medium"]) == (64, 48)
        assert dimensions(result.thumbnail_paths["large"]) == (64, 48)

    async def test_png_keeps_its_format(self, storage):
        data = make_image_bytes((40, 40), image_format="PNG", color=(0, 0, 255, 128))

        result = await TranscodeService.transcode(data, "alpha.png")

        assert result.stored_filename.endswith(".png")
        assert result.mime_type == "image/png"
        with PILImage.open(result.primary_path) as img:
            assert img.format == "PNG"

    async def test_exif_orientation_is_applied(self, storage):
        img = PILImage.new("RGB", (40, 20), color=(10, 20, 30))
        exif = PILImage.Exif()
        exif[0x0112] = 6
        buf = io.BytesIO()
        img.save(buf, format="JPEG", exif=exif)

        result = await TranscodeService.transcode(buf.getvalue(), "rotated.jpg")

        assert (result.width, result.height) == (20, 40)

    async def test_corrupt_bytes_raise_validation_failure_without_files(self, storage):
        with pytest.raises(ValidationFailure):
            await TranscodeService.transcode(b"definitely not an image", "broken.jpg")

        assert stored_files(storage) == []

    async def test_truncated_image_raises_validation_failure(self, storage):
        data = make_image_bytes((200, 200))

        with pytest.raises(ValidationFailure):
            await TranscodeService.transcode(data[: len(data) // 3], "cut.jpg")

        assert stored_files(storage) == []

    async def test_write_failure_removes_partial_files(self, storage, monkeypatch):
        real_write = transcode_service.write_file_bytes
        calls = {"n": 0}

        async def flaky_write(data, path):
            calls["n"] += 1
            if calls["n"] == 3:
                raise OSError("disk full")
            await real_write(data, path)

        monkeypatch.setattr(transcode_service, "write_file_bytes", flaky_write)

        with pytest.raises(StorageFailure):
            await TranscodeService.transcode(make_image_bytes(), "photo.jpg")

        assert stored_files(storage) == []

    async def test_concurrent_uploads_with_same_name_do_not_overwrite(self, storage):
        first, second = await asyncio.gather(
            TranscodeService.transcode(make_image_bytes(color=(255, 0, 0)), "same.jpg"),
            TranscodeService.transcode(make_image_bytes(color=(0, 255, 0)), "same.jpg"),
        )

        assert first.stored_filename != second.stored_filename
        assert len(stored_files(storage)) == 8
