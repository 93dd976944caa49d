"""
Grid Style Configuration

Colour and size tokens for the note grid renderer. Override class attributes
directly to re-theme.
"""

from PyQt6.QtGui import QColor, QFont


def adjust_color(color: QColor, amount: int) -> QColor:
    """Shift each RGB channel by amount, clamped to 0..255 (alpha kept)."""
    return QColor(
        max(0, min(255, color.red() + amount)),
        max(0, min(255, color.green() + amount)),
        max(0, min(255, color.blue() + amount)),
        color.alpha(),
    )


def with_alpha(color: QColor, alpha: float) -> QColor:
    result = QColor(color)
    result.setAlphaF(max(0.0, min(1.0, alpha)))
    return result


class GridStyle:
    """Style configuration for the note grid."""

    # =========================================================================
    # Background
    # =========================================================================
    BG_COLOR = QColor(15, 23, 42)
    GUTTER_BG = QColor(15, 23, 42, 230)
    GUTTER_BORDER = QColor(255, 255, 255, 13)
    ROOT_ROW_BG = QColor(14, 165, 233, 20)
    HOVER_ROW_BG = QColor(30, 41, 59)
    STRUM_ROW_BG = QColor(14, 165, 233)

    # =========================================================================
    # Grid Lines
    # =========================================================================
    ROW_LINE = QColor(255, 255, 255, 13)
    STEP_LINE = QColor(255, 255, 255, 13)
    BEAT_LINE = QColor(255, 255, 255, 38)
    SNAP_LINE = QColor(255, 255, 255, 20)

    # =========================================================================
    # Notes
    # =========================================================================
    DEFAULT_NOTE = QColor(14, 165, 233)
    NOTE_DARKEN = -20
    SELECTED_OVERLAY = QColor(255, 255, 255, 51)
    SELECTED_BORDER = QColor(255, 255, 255)
    HANDLE_COLOR = QColor(255, 255, 255, 40)
    HANDLE_HOVER = QColor(255, 255, 255, 100)
    GRIP_COLOR = QColor(255, 255, 255, 90)
    OCTAVE_UP = QColor(251, 191, 36)
    OCTAVE_DOWN = QColor(167, 139, 250)
    GHOST_ALPHA = 0.45
    CLONE_SOURCE_ALPHA = 0.6

    # =========================================================================
    # Gesture overlays
    # =========================================================================
    MARQUEE_BORDER = QColor(56, 189, 248)
    MARQUEE_FILL = QColor(56, 189, 248, 30)
    TRANSFORM_BORDER = QColor(56, 189, 248, 180)
    TRANSFORM_HANDLE = QColor(255, 255, 255)
    UNQUANTIZED_GHOST = QColor(255, 255, 255, 60)
    ROLL_LEFT = QColor(52, 211, 153)
    ROLL_RIGHT = QColor(244, 114, 182)
    RAZOR_LINE = QColor(248, 113, 113)
    BADGE_BG = QColor(15, 23, 42, 220)
    BADGE_TEXT = QColor(240, 240, 245)

    # =========================================================================
    # Playhead
    # =========================================================================
    PLAYHEAD_COLOR = QColor(255, 255, 255)
    PLAYHEAD_GLOW = QColor(56, 189, 248, 90)
    PLAYHEAD_WIDTH = 2
    PLAYHEAD_GLOW_WIDTH = 8
    PULSE_COLOR = QColor(56, 189, 248)
    PULSE_WIDTH = 4

    # =========================================================================
    # Text
    # =========================================================================
    LABEL_TEXT = QColor(100, 116, 139)
    LABEL_TEXT_ACTIVE = QColor(226, 232, 240)
    ROOT_LABEL_TEXT = QColor(56, 189, 248)

    @classmethod
    def label_font(cls) -> QFont:
        font = QFont()
        font.setPointSize(7)
        font.setBold(True)
        font.setCapitalization(QFont.Capitalization.AllUppercase)
        return font

    @classmethod
    def badge_font(cls) -> QFont:
        font = QFont()
        font.setPointSize(8)
        font.setBold(True)
        return font
