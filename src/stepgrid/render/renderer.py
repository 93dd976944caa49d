"""
Note Grid Renderer

Paints one EditorSnapshot. Pure read-and-paint: never mutates the snapshot
and tolerates stale entries (selection cells without a note, rows without
a RowConfig) by skipping or defaulting them.

Paint order:
1. Background and row gutter (labels, root/hover/strum highlight)
2. Grid lines: step lines, emphasised beat lines, dashed snap lines
3. Committed notes (the ones being edited are hidden unless cloning)
4. Gesture preview
5. Transform box with handles for a multi-selection
6. Playhead, or the proximity pulse while it is scrolled out of view

Grid lines use cosmetic pens and one batched drawLines() call per colour.
"""

import math
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Set

from PyQt6.QtCore import QLineF, QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QLinearGradient, QPainter, QPainterPath, QPen

from ..constants import (
    BEAT_STEPS, HANDLE_WIDTH, NOTE_INSET, NOTE_RADIUS, OCTAVE_STRIP_WIDTH,
    PULSE_MAX_HZ, PULSE_MIN_HZ, TRANSFORM_HANDLE_RADIUS_PX,
)
from ..editing.hit_test import (
    BoundaryHit, EdgeSide, GutterHit, NoteBodyHit, NoteEdgeHit, selection_bounds,
)
from ..editing.machine import members_of
from ..editing.states import (
    Drawing, Idle, Merging, Moving, MovingGroup, PenStroke, ResizingLeft, ResizingLeftGroup,
    ResizingRight, ResizingRightGroup, RollingEdit, Selecting, Splitting, Stretching, Strumming,
)
from ..editing.targets import (
    group_move_requests, group_resize_requests, rolling_requests, single_target,
    stretch_requests, unquantized_stretch,
)
from ..model.grid import iter_notes, note_at, valid_selection
from ..timing.geometry import GridGeometry
from ..timing.snap import clamp
from ..types import CellRef, MoveRequest, Note
from .style import GridStyle, adjust_color, with_alpha

if TYPE_CHECKING:
    from ..core.snapshot import EditorSnapshot


# =============================================================================
# Proximity pulse
# =============================================================================

def offscreen_distance(geometry: GridGeometry, step: float) -> Optional[float]:
    """
    Pixels the playhead still has to travel before it re-enters the view.

    The playhead only moves right and wraps at the pattern end, so it always
    re-enters at the left edge of the note area.

    Returns:
        None while the playhead is visible
    """
    x = geometry.cell_x(step)
    left = geometry.label_width
    if left <= x <= geometry.view_width:
        return None
    if x < left:
        return left - x
    return (geometry.steps - step) * geometry.step_width + geometry.scroll_x


def pulse_frequency(distance_px: float, span_px: float,
                    min_hz: float = PULSE_MIN_HZ, max_hz: float = PULSE_MAX_HZ) -> float:
    """Pulse rate rises from min_hz (far) to max_hz (about to re-enter)."""
    if span_px <= 0:
        return max_hz
    closeness = 1.0 - clamp(distance_px / span_px, 0.0, 1.0)
    return min_hz + (max_hz - min_hz) * closeness


def pulse_alpha(phase: float) -> float:
    return 0.5 + 0.5 * math.sin(phase)


class NoteGridRenderer:
    """
    Draws the grid editor with QPainter.

    Args:
        style: Style class (GridStyle or a subclass)
        pulse_min_hz, pulse_max_hz: Proximity pulse frequency range
        handle_radius_px: Radius of the transform handles
    """

    def __init__(self, style=GridStyle, pulse_min_hz: float = PULSE_MIN_HZ,
                 pulse_max_hz: float = PULSE_MAX_HZ,
                 handle_radius_px: float = TRANSFORM_HANDLE_RADIUS_PX):
        self.style = style
        self.pulse_min_hz = pulse_min_hz
        self.pulse_max_hz = pulse_max_hz
        self.handle_radius_px = handle_radius_px
        self.show_grid_lines = True
        self._pulse_phase = 0.0
        self._pulse_last_s: Optional[float] = None

    def paint(self, painter: QPainter, snapshot: "EditorSnapshot", width: float, height: float,
              now_s: float = 0.0) -> None:
        """Paint one frame of the snapshot into a width x height surface."""
        painter.save()
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            geo = snapshot.geometry
            state = snapshot.interaction

            painter.fillRect(QRectF(0, 0, width, height), self.style.BG_COLOR)
            self._draw_gutter(painter, snapshot, height)

            painter.setClipRect(QRectF(geo.label_width, 0, max(0.0, width - geo.label_width), height))
            if self.show_grid_lines:
                self._draw_grid_lines(painter, snapshot, width, height)

            selected = self._visible_selection(snapshot)
            self._draw_notes(painter, snapshot, selected)
            self._draw_preview(painter, snapshot)
            if not (isinstance(state, Selecting) and state.cleared_selection):
                self._draw_transform_box(painter, snapshot)
            self._draw_playhead(painter, snapshot, height, now_s)
        finally:
            painter.restore()

    # =========================================================================
    # Gutter and grid
    # =========================================================================

    def _draw_gutter(self, painter: QPainter, snapshot: "EditorSnapshot", height: float) -> None:
        geo = snapshot.geometry
        state = snapshot.interaction
        painter.fillRect(QRectF(0, 0, geo.label_width, height), self.style.GUTTER_BG)
        if geo.label_width <= 0:
            return

        hovered_row = state.hovered.row if isinstance(state, Idle) and isinstance(state.hovered, GutterHit) else None
        strum_row = state.row if isinstance(state, Strumming) else None

        painter.setFont(self.style.label_font())
        for r, config in enumerate(snapshot.row_configs):
            y = geo.row_y(r)
            if y + geo.row_height < 0 or y > height:
                continue
            rect = QRectF(0, y, geo.label_width, geo.row_height)
            text_color = self.style.LABEL_TEXT
            if r == strum_row:
                painter.fillRect(rect, self.style.STRUM_ROW_BG)
                text_color = self.style.LABEL_TEXT_ACTIVE
            elif r == hovered_row:
                painter.fillRect(rect, self.style.HOVER_ROW_BG)
                text_color = self.style.LABEL_TEXT_ACTIVE
            elif config.is_root:
                painter.fillRect(rect, self.style.ROOT_ROW_BG)
                text_color = self.style.ROOT_LABEL_TEXT
            painter.setPen(text_color)
            painter.drawText(rect.adjusted(0, 0, -12, 0),
                             Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
                             config.label)

        pen = QPen(self.style.GUTTER_BORDER, 1)
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.drawLine(QLineF(geo.label_width, 0, geo.label_width, height))

    def _draw_grid_lines(self, painter: QPainter, snapshot: "EditorSnapshot",
                         width: float, height: float) -> None:
        geo = snapshot.geometry
        bottom = min(height, geo.row_y(geo.row_count))

        # Root rows tinted across the grid
        for r, config in enumerate(snapshot.row_configs):
            if config.is_root:
                painter.fillRect(QRectF(geo.label_width, geo.row_y(r), width, geo.row_height),
                                 self.style.ROOT_ROW_BG)

        row_lines = [QLineF(geo.label_width, geo.row_y(r), width, geo.row_y(r))
                     for r in range(geo.row_count + 1)]
        step_lines: List[QLineF] = []
        beat_lines: List[QLineF] = []
        snap_lines: List[QLineF] = []
        for i in range(geo.steps + 1):
            x = geo.cell_x(i)
            if x < geo.label_width or x > width:
                continue
            line = QLineF(x, 0, x, bottom)
            if i % BEAT_STEPS == 0:
                beat_lines.append(line)
            elif snapshot.snap > 1 and i % snapshot.snap == 0:
                snap_lines.append(line)
            else:
                step_lines.append(line)

        self._draw_lines(painter, row_lines + step_lines, self.style.ROW_LINE)
        self._draw_lines(painter, snap_lines, self.style.SNAP_LINE, dashed=True)
        self._draw_lines(painter, beat_lines, self.style.BEAT_LINE)

    @staticmethod
    def _draw_lines(painter: QPainter, lines: List[QLineF], color: QColor, dashed: bool = False) -> None:
        if not lines:
            return
        pen = QPen(color, 1)
        pen.setCosmetic(True)
        if dashed:
            pen.setDashPattern([2, 4])
        painter.setPen(pen)
        painter.drawLines(lines)

    # =========================================================================
    # Notes
    # =========================================================================

    def _visible_selection(self, snapshot: "EditorSnapshot") -> Set[CellRef]:
        state = snapshot.interaction
        if isinstance(state, Selecting) and state.cleared_selection:
            return set()
        return set(valid_selection(snapshot.grid, snapshot.selection))

    def _note_rect(self, geo: GridGeometry, row: float, col: float, duration: float) -> QRectF:
        return QRectF(
            geo.cell_x(col) + NOTE_INSET,
            geo.row_y(row) + NOTE_INSET,
            max(0.0, duration * geo.step_width - 2 * NOTE_INSET),
            max(0.0, geo.row_height - 2 * NOTE_INSET),
        )

    def _note_color(self, snapshot: "EditorSnapshot", row: int, note: Optional[Note]) -> QColor:
        if note is not None and note.color is not None:
            return QColor(*note.color)
        if 0 <= row < len(snapshot.row_configs):
            return QColor(*snapshot.row_configs[row].color)
        return QColor(self.style.DEFAULT_NOTE)

    def _draw_notes(self, painter: QPainter, snapshot: "EditorSnapshot", selected: Set[CellRef]) -> None:
        state = snapshot.interaction
        hidden: Set[CellRef] = set()
        if not getattr(state, 'cloning', False):
            hidden = set(members_of(state))
        hovered = self._hovered_cells(state)

        for r, c, note in iter_notes(snapshot.grid):
            cell = CellRef(r, c)
            if cell in hidden:
                continue
            self._draw_note(
                painter,
                self._note_rect(snapshot.geometry, r, c, note.duration),
                self._note_color(snapshot, r, note),
                note.octave_shift,
                selected=cell in selected,
                hovered=cell in hovered,
            )

    @staticmethod
    def _hovered_cells(state) -> Set[CellRef]:
        if not isinstance(state, Idle) or state.hovered is None:
            return set()
        hit = state.hovered
        if isinstance(hit, (NoteBodyHit, NoteEdgeHit)):
            return {hit.cell}
        if isinstance(hit, BoundaryHit):
            return {CellRef(hit.row, hit.left_col), CellRef(hit.row, hit.right_col)}
        return set()

    def _draw_note(self, painter: QPainter, rect: QRectF, color: QColor, octave_shift: int,
                   selected: bool = False, hovered: bool = False, handles: bool = True) -> None:
        if rect.width() <= 0 or rect.height() <= 0:
            return
        path = QPainterPath()
        path.addRoundedRect(rect, NOTE_RADIUS, NOTE_RADIUS)

        gradient = QLinearGradient(rect.topLeft(), rect.bottomLeft())
        gradient.setColorAt(0.0, color)
        gradient.setColorAt(1.0, adjust_color(color, self.style.NOTE_DARKEN))
        painter.fillPath(path, QBrush(gradient))
        if selected:
            painter.fillPath(path, self.style.SELECTED_OVERLAY)

        # Inner highlight on the upper half
        painter.setPen(QPen(QColor(255, 255, 255, 51), 1))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRoundedRect(
            QRectF(rect.x() + 1, rect.y() + 1, max(0.0, rect.width() - 2), rect.height() / 2),
            NOTE_RADIUS, NOTE_RADIUS,
        )

        self._draw_octave_strip(painter, rect, octave_shift)

        if selected:
            painter.setPen(QPen(self.style.SELECTED_BORDER, 3))
        else:
            painter.setPen(QPen(adjust_color(color, 40), 1))
        painter.drawPath(path)

        if handles and rect.width() >= 2 * HANDLE_WIDTH:
            self._draw_handles(painter, rect, hovered)

    def _draw_octave_strip(self, painter: QPainter, rect: QRectF, octave_shift: int) -> None:
        if not octave_shift:
            return
        opacity = 0.3 + min(3, abs(octave_shift)) * 0.2
        base = QColor(255, 255, 255) if octave_shift > 0 else QColor(0, 0, 0)
        strip = QPainterPath()
        strip.addRoundedRect(QRectF(rect.x(), rect.y(), OCTAVE_STRIP_WIDTH, rect.height()),
                             NOTE_RADIUS, NOTE_RADIUS)
        painter.fillPath(strip, with_alpha(base, opacity))

    def _draw_handles(self, painter: QPainter, rect: QRectF, hovered: bool) -> None:
        fill = self.style.HANDLE_HOVER if hovered else self.style.HANDLE_COLOR
        left = QRectF(rect.x(), rect.y(), HANDLE_WIDTH, rect.height())
        right = QRectF(rect.right() - HANDLE_WIDTH, rect.y(), HANDLE_WIDTH, rect.height())
        painter.fillRect(left, fill)
        painter.fillRect(right, fill)

        if rect.height() <= 16:
            return
        grip = QPen(self.style.GRIP_COLOR if hovered else with_alpha(self.style.GRIP_COLOR, 0.2), 1)
        grip.setCosmetic(True)
        painter.setPen(grip)
        top, bottom = rect.y() + 8, rect.bottom() - 8
        lines = []
        for offset in (4, 8):
            lines.append(QLineF(rect.x() + offset, top, rect.x() + offset, bottom))
            lines.append(QLineF(rect.right() - offset, top, rect.right() - offset, bottom))
        painter.drawLines(lines)

    # =========================================================================
    # Gesture previews
    # =========================================================================

    def _draw_preview(self, painter: QPainter, snapshot: "EditorSnapshot") -> None:
        state = snapshot.interaction
        geo = snapshot.geometry
        grid = snapshot.grid
        rows = len(grid)

        if isinstance(state, Drawing):
            self._draw_ghost(painter, self._note_rect(geo, state.row, state.col, state.duration),
                             self._note_color(snapshot, state.row, None), state.octave_shift)
        elif isinstance(state, PenStroke):
            color = self._note_color(snapshot, state.cells[0].row, None)
            for cell in state.cells:
                self._draw_ghost(painter, self._note_rect(geo, cell.row, cell.col, state.duration),
                                 color, state.octave_shift)
        elif isinstance(state, (Moving, ResizingLeft, ResizingRight)):
            row, col, duration = single_target(state, rows, geo.steps)
            octave = state.octave_shift if isinstance(state, Moving) else state.note.octave_shift
            self._draw_solid_preview(painter, self._note_rect(geo, row, col, duration),
                                     self._note_color(snapshot, state.row, state.note), octave)
        elif isinstance(state, MovingGroup):
            requests = group_move_requests(grid, state, rows, geo.steps)
            self._draw_requests(painter, snapshot, requests)
            if state.octave_delta:
                self._draw_badge(painter, snapshot, requests, f"{state.octave_delta:+d} oct")
        elif isinstance(state, (ResizingLeftGroup, ResizingRightGroup)):
            self._draw_requests(painter, snapshot, group_resize_requests(grid, state, geo.steps))
        elif isinstance(state, Stretching):
            self._draw_stretch(painter, snapshot, state)
        elif isinstance(state, RollingEdit):
            left, right = rolling_requests(state)
            for req, note, tint in ((left, state.left_note, self.style.ROLL_LEFT),
                                    (right, state.right_note, self.style.ROLL_RIGHT)):
                rect = self._note_rect(geo, req.to_row, req.to_col, req.data['duration'])
                self._draw_solid_preview(painter, rect, self._note_color(snapshot, req.from_row, note),
                                         note.octave_shift, border=tint)
        elif isinstance(state, Selecting):
            self._draw_marquee(painter, state)
        elif isinstance(state, Splitting):
            x = geo.cell_x(state.at_col)
            pen = QPen(self.style.RAZOR_LINE, 2, Qt.PenStyle.DashLine)
            painter.setPen(pen)
            painter.drawLine(QLineF(x, geo.row_y(state.row), x, geo.row_y(state.row + 1)))
        elif isinstance(state, Merging):
            duration = state.left_note.duration + state.right_note.duration
            self._draw_solid_preview(painter, self._note_rect(geo, state.row, state.left_col, duration),
                                     self._note_color(snapshot, state.row, state.left_note),
                                     state.left_note.octave_shift)

    def _draw_ghost(self, painter: QPainter, rect: QRectF, color: QColor, octave_shift: int) -> None:
        path = QPainterPath()
        path.addRoundedRect(rect, NOTE_RADIUS, NOTE_RADIUS)
        painter.fillPath(path, with_alpha(color, 0.5))
        self._draw_octave_strip(painter, rect, octave_shift)

    def _draw_solid_preview(self, painter: QPainter, rect: QRectF, color: QColor, octave_shift: int,
                            border: Optional[QColor] = None) -> None:
        path = QPainterPath()
        path.addRoundedRect(rect, NOTE_RADIUS, NOTE_RADIUS)
        painter.fillPath(path, color)
        self._draw_octave_strip(painter, rect, octave_shift)
        painter.setPen(QPen(border if border is not None else self.style.SELECTED_BORDER, 2))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawPath(path)

    def _draw_requests(self, painter: QPainter, snapshot: "EditorSnapshot",
                       requests: Sequence[MoveRequest]) -> None:
        geo = snapshot.geometry
        for req in requests:
            note = note_at(snapshot.grid, req.from_row, req.from_col)
            if note is None:
                continue
            preview = note.with_changes(**req.data)
            self._draw_solid_preview(
                painter,
                self._note_rect(geo, req.to_row, req.to_col, preview.duration),
                self._note_color(snapshot, req.from_row, note),
                preview.octave_shift,
            )

    def _draw_stretch(self, painter: QPainter, snapshot: "EditorSnapshot", state: Stretching) -> None:
        geo = snapshot.geometry
        ghost_pen = QPen(self.style.UNQUANTIZED_GHOST, 1, Qt.PenStyle.DashLine)
        for ref in state.members:
            note = note_at(snapshot.grid, ref.row, ref.col)
            if note is None:
                continue
            col, duration = unquantized_stretch(ref.col, note.duration, state.origin, state.ratio)
            painter.setPen(ghost_pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRoundedRect(self._note_rect(geo, ref.row, col, duration), NOTE_RADIUS, NOTE_RADIUS)
        requests = stretch_requests(snapshot.grid, state, snapshot.snap, geo.steps)
        self._draw_requests(painter, snapshot, requests)
        self._draw_badge(painter, snapshot, requests, f"{state.ratio:.2f}x")

    def _draw_badge(self, painter: QPainter, snapshot: "EditorSnapshot",
                    requests: Iterable[MoveRequest], text: str) -> None:
        requests = list(requests)
        if not requests:
            return
        geo = snapshot.geometry
        top_row = min(req.to_row for req in requests)
        right_col = max(req.to_col for req in requests)
        x = geo.cell_x(right_col + 1)
        y = geo.row_y(top_row)
        painter.setFont(self.style.badge_font())
        metrics = painter.fontMetrics()
        rect = QRectF(x - metrics.horizontalAdvance(text) - 10, y - 18,
                      metrics.horizontalAdvance(text) + 10, 16)
        path = QPainterPath()
        path.addRoundedRect(rect, 4, 4)
        painter.fillPath(path, self.style.BADGE_BG)
        painter.setPen(self.style.BADGE_TEXT)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)

    def _draw_marquee(self, painter: QPainter, state: Selecting) -> None:
        min_x, min_y, max_x, max_y = state.rect
        rect = QRectF(min_x, min_y, max_x - min_x, max_y - min_y)
        painter.fillRect(rect, self.style.MARQUEE_FILL)
        pen = QPen(self.style.MARQUEE_BORDER, 1)
        pen.setDashPattern([5, 5])
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(rect)

    # =========================================================================
    # Overlays
    # =========================================================================

    def _draw_transform_box(self, painter: QPainter, snapshot: "EditorSnapshot") -> None:
        bounds = selection_bounds(snapshot.grid, snapshot.selection)
        if bounds is None:
            return
        geo = snapshot.geometry
        left, top, right, bottom = bounds.screen_rect(geo)
        pen = QPen(self.style.TRANSFORM_BORDER, 1, Qt.PenStyle.DashLine)
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(QRectF(left, top, right - left, bottom - top))

        painter.setPen(QPen(self.style.TRANSFORM_BORDER, 1.5))
        painter.setBrush(self.style.TRANSFORM_HANDLE)
        for side in (EdgeSide.LEFT, EdgeSide.RIGHT):
            hx, hy = bounds.handle_point(side, geo)
            painter.drawEllipse(QPointF(hx, hy), self.handle_radius_px * 0.75, self.handle_radius_px * 0.75)

    def _draw_playhead(self, painter: QPainter, snapshot: "EditorSnapshot", height: float, now_s: float) -> None:
        if not snapshot.is_playing or snapshot.playback_step < 0:
            return
        geo = snapshot.geometry
        distance = offscreen_distance(geo, snapshot.playback_step)
        if distance is None:
            self._pulse_last_s = None
            x = geo.cell_x(snapshot.playback_step)
            glow = QPen(self.style.PLAYHEAD_GLOW, self.style.PLAYHEAD_GLOW_WIDTH)
            glow.setCapStyle(Qt.PenCapStyle.FlatCap)
            painter.setPen(glow)
            painter.drawLine(QLineF(x, 0, x, height))
            painter.setPen(QPen(self.style.PLAYHEAD_COLOR, self.style.PLAYHEAD_WIDTH))
            painter.drawLine(QLineF(x, 0, x, height))
            return

        frequency = pulse_frequency(distance, geo.content_width, self.pulse_min_hz, self.pulse_max_hz)
        alpha = pulse_alpha(self.advance_pulse(frequency, now_s))
        x = geo.label_width + self.style.PULSE_WIDTH / 2
        painter.setPen(QPen(with_alpha(self.style.PULSE_COLOR, alpha), self.style.PULSE_WIDTH))
        painter.drawLine(QLineF(x, 0, x, height))

    def advance_pulse(self, frequency_hz: float, now_s: float) -> float:
        """
        Advance the pulse phase by frequency_hz over the time since the last
        pulse frame. Returns the new phase in radians.
        """
        if self._pulse_last_s is not None:
            dt = max(0.0, now_s - self._pulse_last_s)
            self._pulse_phase = (self._pulse_phase + 2 * math.pi * frequency_hz * dt) % (2 * math.pi)
        self._pulse_last_s = now_s
        return self._pulse_phase
