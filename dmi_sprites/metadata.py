r"""Reading and writing the ``# BEGIN DMI`` metadata block.

The block is a line-oriented ``key = value`` grammar. Global keys come
first, then one ``state`` line per state followed by that state's
indented attributes::

    # BEGIN DMI
    version = 4.0
    \twidth = 32
    \theight = 32
    state = idle
    \tdirs = 4
    \tframes = 2
    \tdelay = 1,2
    \thotspot = 16,31,1
    # END DMI
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Union

from dmi_sprites.directions import VALID_DIR_COUNTS
from dmi_sprites.errors import FormatError
from dmi_sprites.hotspots import apply_hotspot, encode_hotspots, format_hotspot_run, parse_hotspot_run
from dmi_sprites.state import AnimationState

if TYPE_CHECKING:
    from dmi_sprites.document import DmiDocument

logger = logging.getLogger(__name__)

DMI_VERSION = "4.0"
HEADER = "# BEGIN DMI"
FOOTER = "# END DMI"
VERSION_LINE = f"version = {DMI_VERSION}"


class MetadataKey(str, Enum):
    WIDTH = "width"
    HEIGHT = "height"
    STATE = "state"
    DIRS = "dirs"
    FRAMES = "frames"
    DELAY = "delay"
    LOOP = "loop"
    REWIND = "rewind"
    MOVEMENT = "movement"
    HOTSPOT = "hotspot"


@dataclass
class ParsedMetadata:
    width: Optional[int] = None
    height: Optional[int] = None
    states: List[AnimationState] = field(default_factory=list)
    # Declared frame counts; the frames themselves come from the pixel grid.
    framecounts: Dict[AnimationState, int] = field(default_factory=dict)
    current: Optional[AnimationState] = None


_NAME_ESCAPES = {"\\": "\\", "n": "\n", "r": "\r"}


def escape_state_name(name: str) -> str:
    return name.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r")


def unescape_state_name(name: str) -> str:
    result: List[str] = []
    index = 0
    while index < len(name):
        char = name[index]
        if char == "\\" and index + 1 < len(name):
            unescaped = _NAME_ESCAPES.get(name[index + 1])
            if unescaped is not None:
                result.append(unescaped)
                index += 2
                continue
        result.append(char)
        index += 1
    return "".join(result)


def serialize(document: "DmiDocument") -> str:
    lines = [
        HEADER,
        VERSION_LINE,
        f"\twidth = {document.width}",
        f"\theight = {document.height}",
    ]
    for state in document.states:
        framecount = state.framecount
        lines.append(f"state = {escape_state_name(state.name)}")
        lines.append(f"\tdirs = {state.dirs}")
        lines.append(f"\tframes = {framecount}")
        if framecount > 1 and state.delays:
            lines.append(f"\tdelay = {','.join(str(delay) for delay in state.delays)}")
        if state.loop != 0:
            lines.append(f"\tloop = {state.loop}")
        if state.rewind:
            lines.append("\trewind = 1")
        if state.movement:
            lines.append("\tmovement = 1")
        if state.hotspots:
            for run in encode_hotspots(state.hotspots):
                lines.append(f"\thotspot = {format_hotspot_run(run)}")
    lines.append(FOOTER)
    return "\n".join(lines) + "\n"


def _parse_int(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        raise FormatError(f"expected an integer, got {value.strip()!r}") from None


def _parse_delay(value: str) -> Union[int, float]:
    value = value.strip()
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        raise FormatError(f"invalid delay value {value!r}") from None


def _require_state(parsed: ParsedMetadata) -> AnimationState:
    if parsed.current is None:
        raise FormatError("no active state")
    return parsed.current


def _parse_size(value: str) -> int:
    size = _parse_int(value)
    if size <= 0:
        raise FormatError(f"frame size must be greater than zero, got {size}")
    return size


def _require_global(parsed: ParsedMetadata, key: MetadataKey) -> None:
    if parsed.states:
        raise FormatError(f"'{key.value}' must come before the first state")


def _handle_width(parsed: ParsedMetadata, value: str) -> None:
    _require_global(parsed, MetadataKey.WIDTH)
    parsed.width = _parse_size(value)


def _handle_height(parsed: ParsedMetadata, value: str) -> None:
    _require_global(parsed, MetadataKey.HEIGHT)
    parsed.height = _parse_size(value)


def _handle_state(parsed: ParsedMetadata, value: str) -> None:
    # Only the separator space is dropped so names keep their own spacing.
    raw_name = value[1:] if value.startswith(" ") else value
    state = AnimationState(unescape_state_name(raw_name))
    parsed.states.append(state)
    parsed.current = state


def _handle_dirs(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    dirs = _parse_int(value)
    if dirs not in VALID_DIR_COUNTS:
        raise FormatError(f"invalid direction count {dirs}")
    state.dirs = dirs


def _handle_frames(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    framecount = _parse_int(value)
    if framecount < 0:
        raise FormatError(f"invalid frame count {framecount}")
    parsed.framecounts[state] = framecount


def _handle_delay(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    state.delays = [_parse_delay(part) for part in value.split(",")]


def _handle_loop(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    state.loop = _parse_int(value)


def _handle_rewind(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    state.rewind = _parse_int(value) == 1


def _handle_movement(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    state.movement = _parse_int(value) == 1


def _handle_hotspot(parsed: ParsedMetadata, value: str) -> None:
    state = _require_state(parsed)
    try:
        x, y, first_frame = parse_hotspot_run(value)
    except ValueError:
        raise FormatError(f"invalid hotspot {value.strip()!r}") from None
    framecount = parsed.framecounts.get(state)
    if framecount is None:
        raise FormatError("out-of-order metadata: hotspot given before the state's frame count")
    if not 1 <= first_frame <= framecount:
        raise FormatError(f"hotspot first frame must be between 1 and {framecount}, got {first_frame}")
    state.hotspots = apply_hotspot(state.hotspots, framecount, x, y, first_frame)


_HANDLERS: Dict[MetadataKey, Callable[[ParsedMetadata, str], None]] = {
    MetadataKey.WIDTH: _handle_width,
    MetadataKey.HEIGHT: _handle_height,
    MetadataKey.STATE: _handle_state,
    MetadataKey.DIRS: _handle_dirs,
    MetadataKey.FRAMES: _handle_frames,
    MetadataKey.DELAY: _handle_delay,
    MetadataKey.LOOP: _handle_loop,
    MetadataKey.REWIND: _handle_rewind,
    MetadataKey.MOVEMENT: _handle_movement,
    MetadataKey.HOTSPOT: _handle_hotspot,
}


def deserialize(text: str) -> ParsedMetadata:
    lines = [line.rstrip("\r") for line in text.split("\n")]
    if lines[0] != HEADER:
        raise FormatError("Missing metadata header.")
    if len(lines) < 2 or lines[1] != VERSION_LINE:
        found = lines[1] if len(lines) > 1 else ""
        raise FormatError(f"Invalid dmi metadata version. Version line is {found!r}.")

    parsed = ParsedMetadata()
    for line_number, line in enumerate(lines[2:], start=3):
        if line == FOOTER:
            break
        if not line.strip():
            continue
        key_text, separator, value = line.partition("=")
        if not separator:
            raise FormatError(f"Line {line_number}: expected 'key = value', got {line!r}.")
        try:
            key = MetadataKey(key_text.strip())
        except ValueError:
            raise FormatError(f"Line {line_number}: unknown metadata key {key_text.strip()!r}.") from None
        try:
            _HANDLERS[key](parsed, value)
        except FormatError as exc:
            raise FormatError(f"Line {line_number}: {exc}") from exc

    logger.debug("Parsed metadata for %d states", len(parsed.states))
    return parsed
