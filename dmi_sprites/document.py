import json
import logging
import pathlib
from typing import Iterable, List, Optional, Union

from PIL import Image

from dmi_sprites import imaging, metadata, packer, png_codec
from dmi_sprites.config import DEFAULT_CONFIG, DmiConfig
from dmi_sprites.errors import ExtractionError
from dmi_sprites.state import AnimationState

logger = logging.getLogger(__name__)

METADATA_KEYWORD = "Description"
PLAIN_IMAGE_STATE_NAME = "png"


class DmiDocument:
    """A DMI sprite file: a global frame size and an ordered list of states."""

    version = metadata.DMI_VERSION

    def __init__(self, width: int, height: int, states: Optional[Iterable[AnimationState]] = None) -> None:
        self.width = width
        self.height = height
        self.states: List[AnimationState] = list(states) if states is not None else []

    def __repr__(self) -> str:
        return f"DmiDocument(width={self.width}, height={self.height}, states={len(self.states)})"

    def get_state(self, name: str) -> Optional[AnimationState]:
        for state in self.states:
            if state.name == name:
                return state
        return None

    @classmethod
    def parse(cls, data: bytes, config: Optional[DmiConfig] = None) -> "DmiDocument":
        """Read a DMI file from its bytes.

        Images without a ``Description`` text chunk load as a single
        ``png`` state holding the whole image. Grammar errors always raise
        FormatError. Frame extraction errors raise unless the config turns
        ``strict_extraction`` off, in which case they are logged and the
        frames read so far are kept.
        """
        config = config or DEFAULT_CONFIG
        decoded = png_codec.decode(data)
        chunk = decoded.find_text(METADATA_KEYWORD)
        if chunk is None:
            logger.debug("No %s chunk, loading %dx%d image as a plain state", METADATA_KEYWORD, decoded.width, decoded.height)
            state = AnimationState(PLAIN_IMAGE_STATE_NAME, dirs=1, frames=[decoded.image])
            return cls(decoded.width, decoded.height, [state])

        parsed = metadata.deserialize(chunk.text)
        default_width, default_height = config.default_size
        document = cls(
            parsed.width if parsed.width is not None else default_width,
            parsed.height if parsed.height is not None else default_height,
            parsed.states,
        )

        try:
            packer.unpack(decoded.image, document, parsed.framecounts)
        except ExtractionError as exc:
            if config.strict_extraction:
                raise
            logger.warning("Frame extraction stopped early, keeping partial states: %s", exc)

        logger.debug("Parsed %r", document)
        return document

    @classmethod
    def load(cls, path: Union[str, pathlib.Path], config: Optional[DmiConfig] = None) -> "DmiDocument":
        return cls.parse(pathlib.Path(path).read_bytes(), config)

    def build_metadata(self) -> str:
        return metadata.serialize(self)

    def build_data(self) -> Image.Image:
        return packer.pack(self)

    def build_file_bytes(self) -> bytes:
        chunk = png_codec.TextChunk("zTXt", METADATA_KEYWORD, self.build_metadata())
        return png_codec.encode(self.build_data(), [chunk])

    def save(self, path: Union[str, pathlib.Path]) -> pathlib.Path:
        output_path = pathlib.Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.build_file_bytes())
        return output_path

    def resize(self, new_width: int, new_height: int) -> None:
        for state in self.states:
            state.replace_frames(imaging.resize(frame, new_width, new_height) for frame in state.frames)
            state.mark_dirty()
        self.width = new_width
        self.height = new_height

    def serialize(self) -> str:
        payload = {
            "width": self.width,
            "height": self.height,
            "states": [state.to_dict() for state in self.states],
        }
        return json.dumps(payload)

    @classmethod
    def deserialize(cls, text: str) -> "DmiDocument":
        payload = json.loads(text)
        states = [AnimationState.from_dict(entry) for entry in payload.get("states", [])]
        return cls(payload["width"], payload["height"], states)

    def is_same(self, other: "DmiDocument") -> bool:
        return self.serialize() == other.serialize()

    def clone(self) -> "DmiDocument":
        return DmiDocument(self.width, self.height, [state.clone() for state in self.states])
