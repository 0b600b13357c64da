"""PNG container reading and writing with keyworded text chunks.

Pixels go through Pillow. Pillow flattens every text chunk into one
``Image.text`` dict, so reading walks the chunk list itself to keep each
chunk's type next to its keyword.
"""
import io
import logging
import struct
import zlib
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from dmi_sprites import imaging
from dmi_sprites.errors import FormatError

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@dataclass
class TextChunk:
    type: str
    keyword: str
    text: str


@dataclass
class DecodedPng:
    image: Image.Image
    width: int
    height: int
    chunks: List[TextChunk] = field(default_factory=list)

    def find_text(self, keyword: str) -> Optional[TextChunk]:
        for chunk in self.chunks:
            if chunk.keyword == keyword:
                return chunk
        return None


def _decode_text(body: bytes) -> TextChunk:
    keyword, _, text = body.partition(b"\0")
    return TextChunk("tEXt", keyword.decode("latin-1"), text.decode("latin-1"))


def _decode_ztxt(body: bytes) -> TextChunk:
    keyword, _, rest = body.partition(b"\0")
    if not rest:
        raise FormatError("zTXt chunk has no compression method.")
    text = zlib.decompress(rest[1:])
    return TextChunk("zTXt", keyword.decode("latin-1"), text.decode("latin-1"))


def _decode_itxt(body: bytes) -> TextChunk:
    keyword, _, rest = body.partition(b"\0")
    if len(rest) < 2:
        raise FormatError("iTXt chunk is truncated.")
    compressed = rest[0] == 1
    rest = rest[2:]
    _language, _, rest = rest.partition(b"\0")
    _translated, _, text = rest.partition(b"\0")
    if compressed:
        text = zlib.decompress(text)
    return TextChunk("iTXt", keyword.decode("latin-1"), text.decode("utf-8"))


_TEXT_DECODERS: Dict[bytes, Callable[[bytes], TextChunk]] = {
    b"tEXt": _decode_text,
    b"zTXt": _decode_ztxt,
    b"iTXt": _decode_itxt,
}


def read_text_chunks(data: bytes) -> List[TextChunk]:
    if not data.startswith(PNG_SIGNATURE):
        return []

    chunks: List[TextChunk] = []
    offset = len(PNG_SIGNATURE)
    while offset + 8 <= len(data):
        length, chunk_type = struct.unpack(">I4s", data[offset:offset + 8])
        body = data[offset + 8:offset + 8 + length]
        crc_bytes = data[offset + 8 + length:offset + 12 + length]
        offset += 12 + length
        if chunk_type == b"IEND":
            break
        decoder = _TEXT_DECODERS.get(chunk_type)
        if decoder is None:
            continue
        if len(body) != length or len(crc_bytes) != 4:
            raise FormatError(f"Truncated {chunk_type.decode('ascii')} chunk.")
        (expected_crc,) = struct.unpack(">I", crc_bytes)
        if zlib.crc32(chunk_type + body) != expected_crc:
            raise FormatError(f"Bad CRC in {chunk_type.decode('ascii')} chunk.")
        try:
            chunks.append(decoder(body))
        except (zlib.error, UnicodeDecodeError) as exc:
            raise FormatError(f"Corrupt {chunk_type.decode('ascii')} chunk: {exc}") from exc
    return chunks


def decode(data: bytes) -> DecodedPng:
    image = imaging.load(data)
    chunks = read_text_chunks(data)
    logger.debug("Decoded %dx%d image with %d text chunks", image.width, image.height, len(chunks))
    return DecodedPng(image, image.width, image.height, chunks)


def encode(image: Image.Image, chunks: Sequence[TextChunk] = ()) -> bytes:
    info = PngInfo()
    for chunk in chunks:
        if chunk.type == "tEXt":
            info.add_text(chunk.keyword, chunk.text)
        elif chunk.type == "zTXt":
            info.add_text(chunk.keyword, chunk.text, zip=True)
        elif chunk.type == "iTXt":
            info.add_itxt(chunk.keyword, chunk.text, zip=True)
        else:
            raise ValueError(f"Unsupported text chunk type: {chunk.type}")

    buffer = io.BytesIO()
    imaging.ensure_rgba(image).save(buffer, format="PNG", pnginfo=info)
    return buffer.getvalue()
