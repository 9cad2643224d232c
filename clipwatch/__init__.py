"""
clipwatch - mirror a clip-playback device's live state for a control surface.

The playback device exposes up to 128 "buttons", each a clip with its own
play/pause/fade/loop state, over a small HTTP API.  clipwatch polls that API,
keeps a local snapshot of every button, and derives what a control surface
needs from it:

- **Variables.** Per-button state, label, ``MM:SS`` times and
  ``HH:MM:SS:FF`` timecodes (30 fps) under ``button_<n>_*`` (1-indexed) and
  ``asset_*_<i>`` (0-indexed), plus a global set describing the active clip.
- **Active clip.** The first button in the device's list that is playing or
  paused.  When nothing is, the global variables are reset every poll.
- **Feedbacks.** Boolean queries - is button *n* playing / fading / paused /
  the current clip, does its loop flag match, is the player as a whole
  playing, paused or stopped.
- **Commands.** Play, stop, toggle, pause, fade, seek, volume, loop, page,
  stop-all, next and output control.
- **Outputs.** An OSC bridge for control surfaces and a terminal status line.

Minimal example:

    ```python
    import clipwatch

    monitor = clipwatch.Monitor(host="192.168.1.20", port=8090, poll_interval=500)
    monitor.feedback("any_playing", "playerStatus", status="playing")
    monitor.display()
    monitor.run()
    ```

Package-level exports: ``Monitor``, ``MonitorConfig``, ``load_config``.
"""

import clipwatch.config
import clipwatch.monitor


Monitor = clipwatch.monitor.Monitor
MonitorConfig = clipwatch.config.MonitorConfig
load_config = clipwatch.config.load_config
