"""
StepGrid Constants

Central location for grid dimensions and timing constants.
Colors are defined in render/style.py for centralized styling.
"""

# =============================================================================
# Pattern
# =============================================================================

STEPS_PER_PATTERN = 16  # Columns in one pattern
BEAT_STEPS = 4  # Emphasised grid line every N columns

MIN_OCTAVE_SHIFT = -3
MAX_OCTAVE_SHIFT = 3

VALID_SNAPS = (1, 2, 4)

# =============================================================================
# Dimensions
# =============================================================================

LABEL_WIDTH = 80  # Row gutter on the left of the grid
DEFAULT_ROW_HEIGHT = 40
DEFAULT_STEP_WIDTH = 60
MIN_ROW_HEIGHT = 18
MIN_STEP_WIDTH = 24

NOTE_INSET = 2  # Gap between note body and cell border
NOTE_RADIUS = 4
HANDLE_WIDTH = 12  # Painted grip width at each note end
OCTAVE_STRIP_WIDTH = 6

EDGE_THRESHOLD_PX = 15  # Pointer band treated as a note edge
TRANSFORM_HANDLE_RADIUS_PX = 8

# =============================================================================
# Gestures
# =============================================================================

DRAG_THRESHOLD_PX = 3  # Movement below this is still a click
QUICK_CLICK_MS = 250  # Press/release window for a click
WHEEL_NOTCH = 120  # angleDelta units per wheel notch
MIN_STRETCH_RATIO = 0.1
MAX_GROUP_OCTAVE_DELTA = MAX_OCTAVE_SHIFT - MIN_OCTAVE_SHIFT

# =============================================================================
# Timing
# =============================================================================

FRAME_INTERVAL_MS = 16  # ~60 FPS (1000ms / 60 = 16.67ms)

# Proximity pulse while the playhead is off screen
PULSE_MIN_HZ = 1.0
PULSE_MAX_HZ = 8.0
