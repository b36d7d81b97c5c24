"""Tests for PDF assembly and data URI helpers."""

import re

import pytest

from slideplay.infra.export.pdf_assembler import (
    PdfAssembler,
    decode_data_uri,
    encode_data_uri,
    load_image,
)

from _helpers.fakes import CORRUPT_IMAGE_URI, image_data_uri

PAGE_PATTERN = re.compile(rb"/Type /Page\b")


class TestDataUri:
    """Test cases for data URI helpers."""

    def test_decode(self):
        mime, data = decode_data_uri(encode_data_uri("image/png", b"\x89PNG"))
        assert mime == "image/png"
        assert data == b"\x89PNG"

    @pytest.mark.parametrize(
        "value",
        ["not-a-uri", "data:image/png,plain", "data:image/png;base64,@@@"],
    )
    def test_decode_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            decode_data_uri(value)

    def test_load_image(self):
        image = load_image(image_data_uri(size=(40, 20)))
        assert image.size == (40, 20)

    def test_load_image_rejects_unreadable_payload(self):
        with pytest.raises(ValueError):
            load_image(CORRUPT_IMAGE_URI)


class TestPdfAssembler:
    """Test cases for PdfAssembler."""

    def test_one_page_per_image(self):
        images = [image_data_uri("png"), image_data_uri("jpeg", color="red"), image_data_uri("png")]

        pdf = PdfAssembler().assemble(images)

        assert pdf.startswith(b"%PDF")
        assert len(PAGE_PATTERN.findall(pdf)) == 3

    def test_page_size_matches_slide(self):
        pdf = PdfAssembler(width=1280, height=720).assemble([image_data_uri()])
        assert re.search(rb"/MediaBox \[\s*0 0 1280 720\s*\]", pdf)

    def test_unreadable_image_is_an_error(self):
        with pytest.raises(ValueError):
            PdfAssembler().assemble([image_data_uri(), CORRUPT_IMAGE_URI])

    def test_no_images_is_an_error(self):
        with pytest.raises(ValueError):
            PdfAssembler().assemble([])

    def test_data_uri_output(self):
        uri = PdfAssembler().assemble_data_uri([image_data_uri()])
        mime, data = decode_data_uri(uri)
        assert mime == "application/pdf"
        assert data.startswith(b"%PDF")
