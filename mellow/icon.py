"""
Tray icon drawing.

A round dial whose teal ring drains as the work interval runs down.
Grey while paused or idle, amber while on a break.
``python -m mellow.icon`` writes icon.ico / icon.png for packaging.
"""
from __future__ import annotations

import math
from typing import Optional

from PIL import Image, ImageDraw

from .scheduler import SessionState, Status

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
TEAL = (0, 128, 128, 255)
DARK_TEAL = (0, 80, 80, 255)
LIGHT_CYAN = (128, 192, 192, 255)
GREY = (110, 118, 118, 255)
DARK_GREY = (70, 80, 80, 255)
AMBER = (251, 191, 36, 255)
DARK_AMBER = (180, 120, 10, 255)

PALETTES = {
    "running": (TEAL, DARK_TEAL),
    "paused": (GREY, DARK_GREY),
    "idle": (GREY, DARK_GREY),
    "break": (AMBER, DARK_AMBER),
}


def create_icon(fraction: Optional[float] = 1.0, mode: str = "running",
                size: int = 64) -> Image.Image:
    """Dial icon; ``fraction`` is the share of the interval still left."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    fill, shade = PALETTES.get(mode, PALETTES["running"])
    s = size / 64  # designed at 64px
    w = max(1, int(2 * s))

    cx, cy = size // 2, size // 2
    r_outer = int(28 * s)
    r_inner = r_outer - max(4, int(8 * s))

    # Outer ring + shaded track
    draw.ellipse([cx - r_outer, cy - r_outer, cx + r_outer, cy + r_outer], fill=BLACK)
    r_track = r_outer - w
    draw.ellipse([cx - r_track, cy - r_track, cx + r_track, cy + r_track], fill=shade)

    # Remaining time, clockwise from 12 o'clock
    if fraction is None:
        fraction = 1.0
    fraction = min(1.0, max(0.0, fraction))
    if fraction >= 1.0:
        draw.ellipse([cx - r_track, cy - r_track, cx + r_track, cy + r_track], fill=fill)
    elif fraction > 0:
        draw.pieslice([cx - r_track, cy - r_track, cx + r_track, cy + r_track],
                      start=-90, end=-90 + 360 * fraction, fill=fill)

    # Face
    draw.ellipse([cx - r_inner - w, cy - r_inner - w, cx + r_inner + w, cy + r_inner + w],
                 fill=BLACK)
    draw.ellipse([cx - r_inner, cy - r_inner, cx + r_inner, cy + r_inner], fill=WHITE)

    # Highlight on the upper-left of the ring
    for a_deg in range(200, 250):
        a = math.radians(a_deg)
        bx = int(cx + (r_outer - w - 1) * math.cos(a))
        by = int(cy + (r_outer - w - 1) * math.sin(a))
        draw.point((bx, by), fill=LIGHT_CYAN)

    if mode == "paused":
        bar_w, bar_h = max(2, int(4 * s)), max(4, int(12 * s))
        gap = max(2, int(3 * s))
        for x0 in (cx - gap - bar_w, cx + gap):
            draw.rectangle([x0, cy - bar_h // 2, x0 + bar_w, cy + bar_h // 2], fill=BLACK)
    else:
        hub = max(2, int(3 * s))
        draw.ellipse([cx - hub, cy - hub, cx + hub, cy + hub], fill=fill, outline=BLACK)
    return img


def icon_mode(status: Status) -> str:
    return {
        SessionState.IDLE: "idle",
        SessionState.PAUSED: "paused",
        SessionState.ON_BREAK: "break",
    }.get(status.state, "running")


def icon_fraction(status: Status) -> float:
    if not status.total or status.remaining is None:
        return 1.0
    return status.remaining / status.total


def generate_icon() -> None:
    """Write icon.ico and icon.png files."""
    sizes = [16, 32, 48, 64, 128, 256]
    images = [create_icon(1.0, "running", s) for s in sizes]
    # ICO: save largest first, append smaller; PIL requires this order
    images[-1].save("icon.ico", format="ICO", append_images=images[:-1])
    images[-1].save("icon.png", format="PNG")


if __name__ == "__main__":
    generate_icon()
