"""
Region drawing surface.

A small state machine fed with pointer events. It is independent of any
canvas implementation: the Streamlit component posts pointer events, the
surface turns them into regions, and the component draws ``shapes()``.

Drag mode (default): press starts a region, moves add points, release keeps
the region open. Click mode: each press adds a point, moves are ignored and
``finish()`` keeps the region open. In both modes a point landing near the
first point of a region with at least three points closes the loop.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_THRESHOLD = 10.0
DEFAULT_PROVISIONAL_COLOR = "#FF0000"
DEFAULT_PALETTE = ["#1f77b4", "#2ca02c", "#9467bd", "#ff7f0e", "#17becf"]
MIN_POINTS_TO_CLOSE = 3


class SurfaceState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class DrawMode(str, Enum):
    DRAG = "drag"
    CLICK = "click"


class PointerEvent(BaseModel):
    """One pointer sample in canvas coordinates."""
    type: Literal["down", "move", "up", "finish"]
    x: float = 0.0
    y: float = 0.0

    @property
    def point(self) -> List[float]:
        return [self.x, self.y]


@dataclass
class Region:
    """A drawn point sequence. Closed regions repeat their first point at the end."""
    points: List[List[float]] = field(default_factory=list)
    color: str = DEFAULT_PROVISIONAL_COLOR
    closed: bool = False

    @property
    def vertex_count(self) -> int:
        """Number of drawn points, not counting the closing point."""
        if self.closed and self.points:
            return len(self.points) - 1
        return len(self.points)


def _distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _loop_start(run: List[List[float]], p: List[float]) -> Optional[int]:
    """Index of the earliest point in ``run`` that ``p`` closes a loop onto."""
    for index, q in enumerate(run):
        if q == p and len(run) - index >= MIN_POINTS_TO_CLOSE:
            return index
    return None


class RegionSurface:
    """Pointer-driven editor for a list of regions."""

    def __init__(self, close_threshold: float = DEFAULT_CLOSE_THRESHOLD,
                 mode: DrawMode = DrawMode.DRAG,
                 palette: Optional[List[str]] = None,
                 provisional_color: str = DEFAULT_PROVISIONAL_COLOR,
                 on_change: Optional[Callable[[List[List[float]]], None]] = None):
        self.close_threshold = float(close_threshold)
        self.mode = DrawMode(mode)
        self.palette = list(palette or DEFAULT_PALETTE)
        self.provisional_color = provisional_color
        self.on_change = on_change
        self._regions: List[Region] = []
        self._current: Optional[Region] = None
        self.selected_index: Optional[int] = None

    # -- state -----------------------------------------------------------

    @property
    def state(self) -> SurfaceState:
        return SurfaceState.IDLE if self._current is None else SurfaceState.DRAWING

    @property
    def regions(self) -> List[Region]:
        """Committed regions (closed or released), oldest first."""
        return list(self._regions)

    @property
    def current(self) -> Optional[Region]:
        """The region being drawn, if any."""
        return self._current

    @property
    def value(self) -> List[List[float]]:
        """All committed points, region after region."""
        return [list(point) for region in self._regions for point in region.points]

    # -- transitions -----------------------------------------------------

    def pointer_down(self, point: Sequence[float]) -> None:
        p = [point[0], point[1]]
        if self._current is None:
            self._current = Region(points=[p], color=self.provisional_color)
            logger.debug(f"Started region at {p}")
            return
        self._extend(p)

    def pointer_move(self, point: Sequence[float]) -> None:
        if self._current is None or self.mode == DrawMode.CLICK:
            return
        self._extend([point[0], point[1]])

    def pointer_up(self) -> None:
        if self._current is None or self.mode == DrawMode.CLICK:
            return
        self._commit(closed=False)

    def finish(self) -> None:
        """Keep the in-progress region as an open region."""
        if self._current is None:
            return
        self._commit(closed=False)

    def _extend(self, p: List[float]) -> None:
        points = self._current.points
        if len(points) >= MIN_POINTS_TO_CLOSE and _distance(p, points[0]) < self.close_threshold:
            points.append(list(points[0]))
            self._commit(closed=True)
        elif _distance(p, points[-1]) >= self.close_threshold:
            points.append(p)
        else:
            logger.debug(f"Dropped near-duplicate point {p}")

    def _commit(self, closed: bool) -> None:
        region = self._current
        region.closed = closed
        region.color = self.palette[len(self._regions) % len(self.palette)]
        self._regions.append(region)
        self._current = None
        logger.debug(f"Committed region {len(self._regions)} ({'closed' if closed else 'open'}, "
                     f"{region.vertex_count} points)")
        self._notify()

    def clear(self) -> None:
        """Drop every region, including the one being drawn."""
        self._regions = []
        self._current = None
        self.selected_index = None
        logger.debug("Cleared drawing surface")
        self._notify()

    def remove_region(self, index: Optional[int]) -> None:
        """Remove one committed region; out-of-range indexes are ignored."""
        if index is None or not 0 <= index < len(self._regions):
            return
        del self._regions[index]
        if self.selected_index is not None:
            if self.selected_index == index:
                self.selected_index = None
            elif self.selected_index > index:
                self.selected_index -= 1
        logger.debug(f"Removed region {index + 1}")
        self._notify()

    def select(self, index: Optional[int]) -> None:
        if index is None or 0 <= index < len(self._regions):
            self.selected_index = index

    def remove_selected(self) -> None:
        self.remove_region(self.selected_index)

    def dispatch(self, event: PointerEvent) -> None:
        if event.type == "down":
            self.pointer_down(event.point)
        elif event.type == "move":
            self.pointer_move(event.point)
        elif event.type == "up":
            self.pointer_up()
        else:
            self.finish()

    def apply_events(self, events: Iterable[Any]) -> None:
        """Apply a batch of events (PointerEvent or plain dicts) in order."""
        for raw in events:
            event = raw if isinstance(raw, PointerEvent) else PointerEvent.model_validate(raw)
            self.dispatch(event)

    def load(self, points: Optional[List[Sequence[float]]]) -> None:
        """
        Rebuild regions from a stored flat point list.

        A point that repeats an earlier point of the pending run (with at
        least three points from there) ends a closed region; points before
        the repeated one form an open region. Leftover points form one open
        region. Does not notify.

        The flat list does not record where open regions end, so consecutive
        open regions come back as a single open region.
        """
        self._regions = []
        self._current = None
        self.selected_index = None
        run: List[List[float]] = []
        for point in points or []:
            p = [point[0], point[1]]
            start = _loop_start(run, p)
            if start is None:
                run.append(p)
                continue
            if start:
                self._append_loaded(run[:start], closed=False)
            self._append_loaded(run[start:] + [p], closed=True)
            run = []
        if run:
            self._append_loaded(run, closed=False)

    def _append_loaded(self, points: List[List[float]], closed: bool) -> None:
        color = self.palette[len(self._regions) % len(self.palette)]
        self._regions.append(Region(points=points, color=color, closed=closed))

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.value)

    # -- presentation ----------------------------------------------------

    def shapes(self) -> List[Dict[str, Any]]:
        """
        Drawing instructions for a canvas.

        Each committed region is a labelled polyline with point markers; the
        in-progress region comes last, unlabelled, in the provisional color.
        """
        shapes = [
            {
                'points': [list(p) for p in region.points],
                'closed': region.closed,
                'color': region.color,
                'label': f"Region {index + 1}",
                'selected': index == self.selected_index,
            }
            for index, region in enumerate(self._regions)
        ]
        if self._current is not None:
            shapes.append({
                'points': [list(p) for p in self._current.points],
                'closed': False,
                'color': self.provisional_color,
                'label': None,
                'selected': False,
            })
        return shapes

    def summaries(self) -> List[str]:
        """Listbox entries for the committed regions."""
        return [
            f"Region {index + 1}: {region.vertex_count} points"
            for index, region in enumerate(self._regions)
        ]
