from __future__ import annotations

from datetime import date

from icon_gen import create_icon_image


def test_icon_size_and_mode() -> None:
    img = create_icon_image(date(2024, 12, 25))
    assert img.size == (64, 64)
    assert img.mode == "RGBA"


def test_badge_drawn_only_with_holidays() -> None:
    plain = create_icon_image(date(2024, 12, 1), 0)
    badged = create_icon_image(date(2024, 12, 1), 2)
    assert badged.getpixel((58, 4))[:3] == (0xD9, 0x30, 0x25)
    assert plain.getpixel((58, 4))[:3] != (0xD9, 0x30, 0x25)
