import logging
import math
from typing import TYPE_CHECKING, Dict, Tuple

from PIL import Image

from dmi_sprites import imaging
from dmi_sprites.directions import DIR_ORDER
from dmi_sprites.errors import ExtractionError, SizeMismatchError

if TYPE_CHECKING:
    from dmi_sprites.document import DmiDocument
    from dmi_sprites.state import AnimationState

logger = logging.getLogger(__name__)


def grid_size(total_frames: int) -> Tuple[int, int]:
    """Columns and rows of the near-square grid holding ``total_frames`` cells."""
    if total_frames <= 0:
        return (1, 1)
    columns = math.ceil(math.sqrt(total_frames))
    rows = math.ceil(total_frames / columns)
    return (columns, rows)


def pack(document: "DmiDocument") -> Image.Image:
    width, height = document.width, document.height
    total_frames = sum(len(state.frames) for state in document.states)
    if total_frames == 0:
        return imaging.blank_frame(width, height)

    columns, rows = grid_size(total_frames)
    canvas = imaging.blank_canvas(columns * width, rows * height)

    index = 0
    for state in document.states:
        for frame in state.frames:
            frame_x = (index % columns) * width
            frame_y = (index // columns) * height
            imaging.paste_pixels(canvas, frame, frame_x, frame_y)
            index += 1

    sheet = imaging.from_pixels(canvas)
    logger.debug("Packed %d frames into a %dx%d grid (%dx%d px)", total_frames, columns, rows, sheet.width, sheet.height)
    return sheet


def unpack(image: Image.Image, document: "DmiDocument", framecounts: Dict["AnimationState", int]) -> None:
    """Cut the packed grid back into each state's frame list.

    Cells are read in the same order ``pack`` writes them, with one running
    index across every state of the document.
    """
    width, height = document.width, document.height
    columns = image.width // width
    if columns == 0:
        raise SizeMismatchError(
            f"Image width {image.width} is smaller than the frame width {width}."
        )

    index = 0
    for state in document.states:
        framecount = framecounts.get(state)
        if framecount is None:
            raise ExtractionError(f"State {state.name!r} is missing its frame count metadata.")
        for _frame in range(framecount):
            for _dir in range(state.dirs):
                cell_x = width * (index % columns)
                cell_y = height * (index // columns)
                frame = imaging.crop(image, cell_x, cell_y, width, height)
                if frame.size != (width, height):
                    raise SizeMismatchError(
                        f"Mismatched size when extracting frame {index} of state {state.name!r}: "
                        f"expected {width}x{height}, got {frame.width}x{frame.height}."
                    )
                state.add_frame(frame)
                index += 1

    logger.debug("Extracted %d frames from a %dx%d image", index, image.width, image.height)


def build_composite(state: "AnimationState") -> Image.Image:
    """Lay one state out with a row per direction and a column per frame."""
    width, height = state.width, state.height
    framecount = state.framecount
    composite = imaging.blank_frame(width * framecount, height * state.dirs)
    for dir_index in range(state.dirs):
        direction = DIR_ORDER[dir_index]
        for frame_index in range(framecount):
            frame = state.get_frame(frame_index, direction)
            # Row pitch is the frame width; only square frames tile exactly.
            imaging.paste(composite, frame, frame_index * width, dir_index * width)
    return composite
