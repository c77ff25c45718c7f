"""Theme colors and color utilities for the UI."""


class QuizColors:
    """Warm yellow/orange palette of the quiz screens."""

    BG_TOP = "#ffd60a"
    BG_BOTTOM = "#ff9f1c"
    BG_QUIZ = "#fcd200"

    CARD_BG = "#ffffff"
    TEXT_PRIMARY = "#111111"
    TEXT_SECONDARY = "#555555"

    CORRECT = "#2e7d32"
    INCORRECT = "#c62828"
    HINT = "#1565c0"

    PROGRESS_EMPTY = "#c8e6c9"
    PROGRESS_FULL = "#2e7d32"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ar, ag, ab = int(a[1:3], 16), int(a[3:5], 16), int(a[5:7], 16)
        br, bg, bb = int(b[1:3], 16), int(b[3:5], 16), int(b[5:7], 16)
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    r = int(ar + (br - ar) * t)
    g = int(ag + (bg - ag) * t)
    bl = int(ab + (bb - ab) * t)
    return f"#{r:02X}{g:02X}{bl:02X}"


def progress_color(progress: int) -> str:
    """Fill color for a game's progress bar, darker green as it fills."""
    return blend_hex(QuizColors.PROGRESS_EMPTY, QuizColors.PROGRESS_FULL, progress / 100.0)


def timer_color(remaining_seconds: int) -> str:
    """Countdown text turns red in the last five seconds."""
    return QuizColors.INCORRECT if remaining_seconds < 5 else QuizColors.TEXT_PRIMARY
