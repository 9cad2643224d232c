"""Device and polling constants.

The playback device exposes a small HTTP API.  Button numbers are 1-based on
the host side; the device addresses the same buttons as ``button-<n - 1>``.

Button states reported by the device:
- `STATE_IDLE`: nothing loaded or never played
- `STATE_PLAYING`: clip is running
- `STATE_PAUSED`: clip is held at its current position
- `STATE_FADING`: clip is fading out
- `STATE_STOPPED`: clip was stopped
"""

# Button states

STATE_IDLE = "idle"
STATE_PLAYING = "playing"
STATE_PAUSED = "paused"
STATE_FADING = "fading"
STATE_STOPPED = "stopped"

BUTTON_STATES = (STATE_IDLE, STATE_PLAYING, STATE_PAUSED, STATE_FADING, STATE_STOPPED)

# A clip in either of these states is the one in focus for the global variables.
ACTIVE_STATES = (STATE_PLAYING, STATE_PAUSED)

# Device API

STATUS_PATH = "/api/status"
MAX_BUTTONS = 128

# Timecode

FRAMES_PER_SECOND = 30

# Polling (milliseconds)

DEFAULT_POLL_INTERVAL_MS = 1000
MIN_POLL_INTERVAL_MS = 100
MAX_POLL_INTERVAL_MS = 10000

# Connection defaults

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8090
DEFAULT_TIMEOUT_SECONDS = 5.0
