from __future__ import annotations

_MULTIPLIERS = {"h": 3600.0, "m": 60.0, "s": 1.0}


def parse_duration(text: str | int | float | None) -> float | None:
    """
    '400ms', '5s', '1m', '1h' -> секунды (float).
    Число возвращается как есть, None/пустая строка -> None.
    """
    if text is None:
        return None
    if isinstance(text, (int, float)):
        return float(text)
    s = str(text).strip().lower()
    if not s:
        return None
    if s.endswith("ms"):
        return float(s[:-2]) / 1000.0
    unit = s[-1]
    if unit in _MULTIPLIERS:
        return float(s[:-1]) * _MULTIPLIERS[unit]
    return float(s)


def format_seconds(value: float) -> str:
    return f"{int(value)}s" if float(value).is_integer() else f"{value:.1f}s"
