import base64
import io
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from PIL import Image

from dmi_sprites import imaging, packer
from dmi_sprites.directions import VALID_DIR_COUNTS, Dirs, dir_ordinal
from dmi_sprites.hotspots import Hotspot

logger = logging.getLogger(__name__)

# Milliseconds per delay tick in generated previews.
PREVIEW_DELAY_SCALE = 100

Delay = Union[int, float]
T = TypeVar("T")


def resize_list(items: List[T], new_size: int, filler: Callable[[int], T]) -> List[T]:
    if len(items) < new_size:
        items.extend(filler(index) for index in range(len(items), new_size))
    elif len(items) > new_size:
        del items[new_size:]
    return items


def validate_dirs(dirs: int) -> int:
    if dirs not in VALID_DIR_COUNTS:
        raise ValueError(f"Direction count must be one of {VALID_DIR_COUNTS}, got {dirs!r}.")
    return dirs


class AnimationState:
    """One named animation inside a DMI document.

    Frames are stored frame-major: all directions of frame 0, then all
    directions of frame 1 and so on, each frame's directions in DIR_ORDER.
    ``frames_encoded`` holds the PNG encoding of each frame and is kept
    aligned with ``frames`` by every mutator.
    """

    def __init__(
        self,
        name: str,
        loop: int = 0,
        rewind: bool = False,
        movement: bool = False,
        dirs: int = 1,
        frames: Optional[Iterable[Image.Image]] = None,
        delays: Optional[Iterable[Delay]] = None,
        hotspots: Optional[Iterable[Optional[Hotspot]]] = None,
    ) -> None:
        self.name = name
        self.loop = loop
        self.rewind = rewind
        self.movement = movement
        self.dirs = validate_dirs(dirs)
        self.frames: List[Image.Image] = []
        self.frames_encoded: List[bytes] = []
        self.delays: List[Delay] = list(delays) if delays is not None else []
        self.hotspots: Optional[List[Optional[Hotspot]]] = list(hotspots) if hotspots is not None else None
        self.directional_previews: Dict[int, bytes] = {}
        for frame in frames or ():
            self.add_frame(frame)

    def __repr__(self) -> str:
        return f"AnimationState(name={self.name!r}, dirs={self.dirs}, framecount={self.framecount})"

    @property
    def framecount(self) -> int:
        return len(self.frames) // self.dirs

    @property
    def width(self) -> int:
        return self._first_frame().width

    @property
    def height(self) -> int:
        return self._first_frame().height

    def _first_frame(self) -> Image.Image:
        if not self.frames:
            raise ValueError(f"State {self.name!r} has no frames.")
        return self.frames[0]

    def frame_index(self, frame: int = 0, dir: int = Dirs.SOUTH) -> int:
        ordinal = dir_ordinal(dir)
        # States with fewer directions fall back to South.
        if ordinal < 0 or ordinal >= self.dirs:
            ordinal = 0
        return frame * self.dirs + ordinal

    def get_frame(self, frame: int = 0, dir: int = Dirs.SOUTH) -> Image.Image:
        return self.frames[self.frame_index(frame, dir)]

    def get_frame_encoded(self, frame: int = 0, dir: int = Dirs.SOUTH) -> bytes:
        return self.frames_encoded[self.frame_index(frame, dir)]

    def add_frame(self, image: Image.Image) -> None:
        frame = imaging.ensure_rgba(image)
        self.frames.append(frame)
        self.frames_encoded.append(imaging.encode_png(frame))

    def replace_frames(self, frames: Iterable[Image.Image]) -> None:
        frames = list(frames)
        self.frames = []
        self.frames_encoded = []
        for frame in frames:
            self.add_frame(frame)

    def set_dirs(self, new_dircount: int, size: Optional[Tuple[int, int]] = None) -> None:
        validate_dirs(new_dircount)
        target_frames = self.framecount * new_dircount
        self.dirs = new_dircount
        self._resize_frames(target_frames, size)
        self._resize_timing()

    def set_framecount(self, new_framecount: int, size: Optional[Tuple[int, int]] = None) -> None:
        if new_framecount < 0:
            raise ValueError("Frame count cannot be negative.")
        self._resize_frames(new_framecount * self.dirs, size)
        self._resize_timing()

    def _resize_frames(self, target_frames: int, size: Optional[Tuple[int, int]]) -> None:
        if len(self.frames) >= target_frames:
            del self.frames[target_frames:]
            del self.frames_encoded[target_frames:]
            return
        if size is None:
            if not self.frames:
                raise ValueError(f"State {self.name!r} has no frames to take a size from.")
            size = self.frames[0].size
        width, height = size
        while len(self.frames) < target_frames:
            self.add_frame(imaging.blank_frame(width, height))

    def _resize_timing(self) -> None:
        framecount = self.framecount
        if self.delays:
            resize_list(self.delays, framecount, lambda index: 1)
        if self.hotspots is not None:
            last_hotspot = self.hotspots[-1] if self.hotspots else None
            resize_list(self.hotspots, framecount, lambda index: last_hotspot)

    def mark_dirty(self) -> None:
        self.directional_previews = {}

    def generate_preview(self, dir: int = Dirs.SOUTH, delay_scale: float = PREVIEW_DELAY_SCALE) -> bytes:
        """PNG bytes previewing one direction, animated when there are several frames.

        Results are cached per direction until ``mark_dirty`` is called.
        """
        key = int(dir)
        cached = self.directional_previews.get(key)
        if cached is not None:
            return cached

        framecount = self.framecount
        if framecount == 0:
            raise ValueError(f"State {self.name!r} has no frames to preview.")
        if framecount == 1:
            preview = self.get_frame_encoded(0, dir)
        else:
            frames = [self.get_frame(index, dir) for index in range(framecount)]
            delays = self.delays if self.delays else [1] * framecount
            durations = [int(round(delay * delay_scale)) for delay in delays]
            buffer = io.BytesIO()
            frames[0].save(
                buffer,
                format="PNG",
                save_all=True,
                append_images=frames[1:],
                duration=durations,
                loop=0,
            )
            preview = buffer.getvalue()
            logger.debug("Encoded %d frame preview for %r dir %d", framecount, self.name, key)

        self.directional_previews[key] = preview
        return preview

    def build_composite(self) -> bytes:
        return imaging.encode_png(packer.build_composite(self))

    def clone(self) -> "AnimationState":
        return AnimationState(
            self.name,
            loop=self.loop,
            rewind=self.rewind,
            movement=self.movement,
            dirs=self.dirs,
            frames=[frame.copy() for frame in self.frames],
            delays=self.delays,
            hotspots=self.hotspots,
        )

    def to_dict(self) -> Dict[str, Any]:
        hotspots = None
        # A list without any hotspot is written as no hotspot lines at all.
        if self.hotspots is not None and any(value is not None for value in self.hotspots):
            hotspots = [list(value) if value is not None else None for value in self.hotspots]
        return {
            "name": self.name,
            "loop": self.loop,
            "rewind": self.rewind,
            "movement": self.movement,
            "dirs": self.dirs,
            "frames_encoded": [base64.b64encode(data).decode("ascii") for data in self.frames_encoded],
            "delays": list(self.delays),
            "hotspots": hotspots,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AnimationState":
        hotspots = payload.get("hotspots")
        if hotspots is not None:
            hotspots = [tuple(value) if value is not None else None for value in hotspots]
        frames = [
            imaging.load(base64.b64decode(data))
            for data in payload.get("frames_encoded", [])
        ]
        return cls(
            payload["name"],
            loop=payload.get("loop", 0),
            rewind=payload.get("rewind", False),
            movement=payload.get("movement", False),
            dirs=payload.get("dirs", 1),
            frames=frames,
            delays=payload.get("delays"),
            hotspots=hotspots,
        )
