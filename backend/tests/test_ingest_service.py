"""
Storefront Backend — Multipart Ingestor Unit Tests
====================================================

What:  Tests for MultipartIngestor and ParsedForm.
How:   Multipart bodies are encoded by httpx and fed to a bare Starlette
       Request; temporary files land in a per-test directory.

Test Strategy:
    ✅ Text fields and file handles are separated
    ✅ Single and repeated file fields both normalize to lists
    ✅ Empty file parts are ignored
    ✅ Malformed bodies raise ParseError
    ✅ cleanup() removes every temporary file
"""

import io
from pathlib import Path

import pytest
from starlette.datastructures import Headers, UploadFile

from conftest import make_multipart_request
from storefront.exceptions import ParseError
from storefront.services.ingest_service import ParsedForm, UploadedFile, _is_empty_part


class TestMultipartIngestor:
    """Parsing behaviour of MultipartIngestor.parse()."""

    @pytest.mark.asyncio
    async def test_parse_fields_and_single_file(self, ingestor, upload_dir, sample_image_bytes):
        request = make_multipart_request(
            data={"name": "Charm", "price": "12.5"},
            files=[("photo", ("charm.jpg", sample_image_bytes, "image/jpeg"))],
        )

        form = await ingestor.parse(request)

        assert form.fields == {"name": "Charm", "price": "12.5"}
        photos = form.files_for("photo")
        assert len(photos) == 1
        assert photos[0].content_type == "image/jpeg"
        assert photos[0].filename == "charm.jpg"
        assert photos[0].size == len(sample_image_bytes)
        assert Path(photos[0].path).parent == upload_dir.resolve()
        assert Path(photos[0].path).read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_repeated_file_field_keeps_order(self, ingestor, sample_image_bytes, other_image_bytes):
        request = make_multipart_request(
            data={"name": "Charm"},
            files=[
                ("extraPhotos", ("one.jpg", sample_image_bytes, "image/jpeg")),
                ("extraPhotos", ("two.png", other_image_bytes, "image/png")),
                ("extraPhotos", ("three.jpg", b"third", "image/jpeg")),
            ],
        )

        form = await ingestor.parse(request)

        extras = form.files_for("extraPhotos")
        assert [u.filename for u in extras] == ["one.jpg", "two.png", "three.jpg"]
        assert Path(extras[1].path).read_bytes() == other_image_bytes

    @pytest.mark.asyncio
    async def test_each_upload_gets_distinct_path(self, ingestor, sample_image_bytes):
        request = make_multipart_request(
            data={"name": "Charm"},
            files=[
                ("extraPhotos", ("same.jpg", sample_image_bytes, "image/jpeg")),
                ("extraPhotos", ("same.jpg", sample_image_bytes, "image/jpeg")),
            ],
        )

        form = await ingestor.parse(request)

        paths = [u.path for u in form.files_for("extraPhotos")]
        assert len(set(paths)) == 2
        assert all(p.endswith(".jpg") for p in paths)

    @pytest.mark.asyncio
    async def test_missing_file_field_is_empty_list(self, ingestor):
        request = make_multipart_request(data={"name": "Charm"}, files=[("other", ("x.txt", b"x", "text/plain"))])

        form = await ingestor.parse(request)

        assert form.files_for("photo") == []
        assert form.files_for("extraPhotos") == []

    @pytest.mark.asyncio
    async def test_non_multipart_body_raises_parse_error(self, ingestor):
        request = make_multipart_request(data={"name": "Charm"}, content_type="application/json")

        with pytest.raises(ParseError):
            await ingestor.parse(request)

    @pytest.mark.asyncio
    async def test_missing_boundary_raises_parse_error(self, ingestor, sample_image_bytes):
        request = make_multipart_request(
            data={"name": "Charm"},
            files=[("photo", ("charm.jpg", sample_image_bytes, "image/jpeg"))],
            content_type="multipart/form-data",
        )

        with pytest.raises(ParseError):
            await ingestor.parse(request)

    @pytest.mark.asyncio
    async def test_cleanup_removes_all_temp_files(self, ingestor, upload_dir, sample_image_bytes):
        request = make_multipart_request(
            data={"name": "Charm"},
            files=[
                ("photo", ("main.jpg", sample_image_bytes, "image/jpeg")),
                ("extraPhotos", ("a.jpg", sample_image_bytes, "image/jpeg")),
                ("extraPhotos", ("b.jpg", sample_image_bytes, "image/jpeg")),
            ],
        )
        form = await ingestor.parse(request)
        assert len(list(upload_dir.iterdir())) == 3

        await form.cleanup()

        assert list(upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_text_only_form_is_accepted(self, ingestor):
        form = await ingestor.parse(make_multipart_request(data={"name": "Plain", "price": "3"}))

        assert form.fields == {"name": "Plain", "price": "3"}
        assert form.all_files() == []


class TestParsedForm:
    """Helpers on the parse result."""

    def test_empty_part_detection(self):
        empty = UploadFile(file=io.BytesIO(b""), filename="", size=0)
        named = UploadFile(
            file=io.BytesIO(b"data"),
            filename="a.jpg",
            size=4,
            headers=Headers({"content-type": "image/jpeg"}),
        )
        assert _is_empty_part(empty) is True
        assert _is_empty_part(named) is False

    @pytest.mark.asyncio
    async def test_cleanup_tolerates_already_deleted_files(self, tmp_path):
        existing = tmp_path / "kept.jpg"
        existing.write_bytes(b"x")
        form = ParsedForm(
            files={
                "photo": [UploadedFile(path=str(existing))],
                "extraPhotos": [UploadedFile(path=str(tmp_path / "gone.jpg"))],
            }
        )

        # Should not raise
        await form.cleanup()
        assert not existing.exists()

    def test_files_for_returns_copy(self):
        handle = UploadedFile(path="/tmp/x.jpg")
        form = ParsedForm(files={"photo": [handle]})

        photos = form.files_for("photo")
        photos.clear()

        assert form.files_for("photo") == [handle]


class TestSpoolFailure:
    """Files written before an unexpected failure do not outlive the request."""

    @pytest.mark.asyncio
    async def test_unexpected_error_removes_written_files(self, ingestor, upload_dir, sample_image_bytes, monkeypatch):
        original_spool = ingestor._spool
        spooled = []

        async def spool_then_fail(part):
            if spooled:
                raise RuntimeError("stream reset")
            spooled.append(await original_spool(part))
            return spooled[-1]

        monkeypatch.setattr(ingestor, "_spool", spool_then_fail)
        request = make_multipart_request(
            data={"name": "Charm"},
            files=[
                ("photo", ("main.jpg", sample_image_bytes, "image/jpeg")),
                ("extraPhotos", ("a.jpg", sample_image_bytes, "image/jpeg")),
            ],
        )

        with pytest.raises(RuntimeError):
            await ingestor.parse(request)

        assert len(spooled) == 1
        assert list(upload_dir.iterdir()) == []
