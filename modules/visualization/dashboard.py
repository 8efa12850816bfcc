"""
On-screen overlay: mode badge, current command, status and debug lines.
"""

import logging
import cv2
import numpy as np

logger = logging.getLogger(__name__)

BADGE_ACTIVE = (60, 170, 40)       # BGR green
BADGE_SUSPENDED = (0, 190, 255)    # BGR amber


def _ascii(text: str) -> str:
    """Hershey fonts only cover ASCII."""
    return text.replace("\u2014", "-").replace("\u00b0", " deg")


class Dashboard:
    """Renders the status overlay for the gesture navigation window."""

    def __init__(self, config: dict):
        self._show_fps = config.get("show_fps", True)
        self._mirror_preview = config.get("mirror_preview", True)
        dash_cfg = config.get("dashboard", {})
        self._bar_opacity = dash_cfg.get("opacity", 0.7)
        self._bar_height = dash_cfg.get("height", 90)
        self._color_text = tuple(config.get("text_color", [255, 255, 255]))

    def render(self, frame: np.ndarray, state: dict) -> np.ndarray:
        """Render the overlay.

        Args:
            frame: BGR frame (landmarks already drawn, unmirrored)
            state: dict with
                - mode: "active" | "suspended"
                - command: stable command label
                - status: status line
                - debug: debug line
                - fps: float

        Returns:
            Frame ready for display
        """
        if self._mirror_preview:
            frame = cv2.flip(frame, 1)
        h, w = frame.shape[:2]

        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (w, self._bar_height), (20, 20, 20), -1)
        cv2.addWeighted(overlay, self._bar_opacity, frame, 1 - self._bar_opacity, 0, frame)

        self._draw_badge(frame, w, state.get("mode", "active"))

        command = state.get("command") or "—"
        cv2.putText(frame, _ascii(f"Command: {command}"), (15, 35),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.8, self._color_text, 2)
        cv2.putText(frame, _ascii(state.get("status", "")), (15, 62),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, self._color_text, 1)
        cv2.putText(frame, _ascii(state.get("debug", "")), (15, 82),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.4, (200, 200, 200), 1)

        if self._show_fps:
            cv2.putText(frame, f"FPS: {state.get('fps', 0.0):.1f}", (w - 120, h - 15),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 0), 1)
        return frame

    def _draw_badge(self, frame, w, mode):
        suspended = mode == "suspended"
        text = "SUSPENDED" if suspended else "ACTIVE"
        color = BADGE_SUSPENDED if suspended else BADGE_ACTIVE
        (tw, th), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.6, 2)
        x1 = w - tw - 30
        cv2.rectangle(frame, (x1, 12), (w - 10, 22 + th), color, -1)
        cv2.putText(frame, text, (x1 + 10, 17 + th),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (20, 20, 20), 2)
