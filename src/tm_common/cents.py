"""Integer arithmetic utilities for cents-denominated ticket prices.

All prices and amounts use int (cents). No float, no Decimal.
"""


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"


def ratio_exceeds(price: int, face_value: int, percent: int) -> bool:
    """True if price > face_value * percent / 100, compared in integers."""
    return price * 100 > face_value * percent


def ratio_below(price: int, face_value: int, percent: int) -> bool:
    """True if price < face_value * percent / 100, compared in integers."""
    return price * 100 < face_value * percent


def ratio_percent(price: int, face_value: int) -> int:
    """Price as a rounded percentage of face value: (1500, 1000) -> 150."""
    if face_value <= 0:
        raise ValueError(f"face_value must be positive, got {face_value}")
    return (price * 100 + face_value // 2) // face_value
