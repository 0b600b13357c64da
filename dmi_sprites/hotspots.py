from typing import Iterable, List, Optional, Sequence, Tuple

Hotspot = Tuple[int, int]
HotspotRun = Tuple[int, int, int]


def encode_hotspots(hotspots: Sequence[Optional[Hotspot]]) -> List[HotspotRun]:
    """Collapse per-frame hotspots into ``(x, y, first_frame)`` runs.

    ``first_frame`` is 1-based. Frames without a hotspot are skipped and do
    not break the run they sit in.
    """
    runs: List[HotspotRun] = []
    previous: Optional[Hotspot] = None
    for index, value in enumerate(hotspots):
        if value is None:
            continue
        x, y = value
        if previous is None or previous[0] != x or previous[1] != y:
            runs.append((x, y, index + 1))
            previous = (x, y)
    return runs


def apply_hotspot(
    hotspots: Optional[List[Optional[Hotspot]]],
    framecount: int,
    x: int,
    y: int,
    first_frame: int,
) -> List[Optional[Hotspot]]:
    if first_frame < 1:
        raise ValueError(f"Hotspot first frame must be 1 or greater, got {first_frame}.")
    if hotspots is None:
        hotspots = [None] * framecount
    for index in range(first_frame - 1, len(hotspots)):
        hotspots[index] = (x, y)
    return hotspots


def decode_hotspots(runs: Iterable[HotspotRun], framecount: int) -> Optional[List[Optional[Hotspot]]]:
    hotspots = None
    for x, y, first_frame in runs:
        hotspots = apply_hotspot(hotspots, framecount, x, y, first_frame)
    return hotspots


def format_hotspot_run(run: HotspotRun) -> str:
    x, y, first_frame = run
    return f"{x},{y},{first_frame}"


def parse_hotspot_run(value: str) -> HotspotRun:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 3:
        raise ValueError(f"Hotspot needs 'x,y,frame', got {value!r}.")
    x, y, first_frame = (int(part) for part in parts)
    return (x, y, first_frame)
