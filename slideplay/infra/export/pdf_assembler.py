"""
Multi-page PDF assembly from captured slide images.
"""

import base64
import binascii
import io
from typing import Iterable, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from slideplay.infra.config.logging_config import get_logger

log = get_logger("infra.pdf")

PDF_MIME = "application/pdf"


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Split ``data:<mime>[;...];base64,<payload>`` into (mime, bytes)."""
    if not data_uri.startswith("data:") or "," not in data_uri:
        raise ValueError("Not a data URI")
    header, payload = data_uri[5:].split(",", 1)
    parts = header.split(";")
    if "base64" not in parts[1:]:
        raise ValueError("Only base64 data URIs are supported")
    try:
        return parts[0] or "text/plain", base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e


def encode_data_uri(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def load_image(data_uri: str) -> Image.Image:
    """Decode a captured image. Raises ValueError when it is not a readable image."""
    _, raw = decode_data_uri(data_uri)
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Unreadable image: {e}") from e
    return image


class PdfAssembler:
    """One landscape page per image, each page the size of the slide."""

    def __init__(self, width: int = 1920, height: int = 1080) -> None:
        self.width = width
        self.height = height

    def assemble(self, data_uris: Iterable[str]) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(self.width, self.height), pageCompression=1)

        pages = 0
        for index, data_uri in enumerate(data_uris):
            if index > 0:
                pdf.showPage()
            image = load_image(data_uri)
            pdf.drawImage(ImageReader(image), 0, 0, width=self.width, height=self.height)
            pages += 1

        if pages == 0:
            raise ValueError("Cannot assemble a PDF without images")

        pdf.showPage()
        pdf.save()
        log.info("export.pdf.assembled", pages=pages, size=buffer.tell())
        return buffer.getvalue()

    def assemble_data_uri(self, data_uris: Iterable[str]) -> str:
        return encode_data_uri(PDF_MIME, self.assemble(data_uris))
