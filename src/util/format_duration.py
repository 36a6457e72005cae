"""Human-readable elapsed-time strings for progress log lines."""


def format_duration(seconds: float) -> str:
    """Format ``seconds`` as e.g. ``"1h 2m 3.4s"``, ``"2m 0.5s"`` or ``"0.1s"``.

    Leading zero units are omitted; tenths of a second are always shown.
    """
    remainder = max(0.0, seconds)
    hours, remainder = divmod(remainder, 3600)
    minutes, remainder = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{remainder:.1f}s")
    return " ".join(parts)
