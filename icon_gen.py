"""Generate the system-tray icon (64×64 PIL Image, in-memory)."""

from datetime import date

from PIL import Image, ImageDraw, ImageFont

_BADGE = "#D93025"


def _fit_font(draw: ImageDraw.ImageDraw, text: str, size: int):
    """Largest font (down from 120pt) whose rendering of ``text`` fits ``size``."""
    font_size = 120
    font = None
    while font_size > 10:
        try:
            font = ImageFont.truetype("DejaVuSans-Bold.ttf", font_size)
        except OSError:
            font = ImageFont.load_default()
            break
        bbox = draw.textbbox((0, 0), text, font=font)
        if bbox[2] - bbox[0] <= size and bbox[3] - bbox[1] <= size:
            break
        font_size -= 1
    return font


def create_icon_image(today: date | None = None, holiday_count: int = 0) -> Image.Image:
    """Return a 64×64 RGBA image: today's day-of-month, red dot when it has holidays."""
    size = 64
    img = Image.new("RGBA", (size, size), "white")
    draw = ImageDraw.Draw(img)

    text = str((today or date.today()).day)
    font = _fit_font(draw, text, size)

    # Centre the actual visible pixels (compensate for font metric offsets)
    bbox = draw.textbbox((0, 0), text, font=font)
    x = (size - (bbox[2] - bbox[0])) / 2 - bbox[0]
    y = (size - (bbox[3] - bbox[1])) / 2 - bbox[1]
    draw.text((x, y), text, fill="black", font=font)

    if holiday_count > 0:
        r = 11
        draw.ellipse((size - 2 * r, 0, size - 1, 2 * r - 1), fill=_BADGE)

    return img
