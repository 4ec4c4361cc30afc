from __future__ import annotations

from deckwatch.models import ButtonInfo

EMPTY_VALUE = "-"


def format_button_key(key: str) -> str:
    """Turn a ``"column,row"`` key into a 1-based ``R<row>:C<column>`` label."""
    parts = key.split(",")
    if len(parts) == 2:
        try:
            column, row = int(parts[0]), int(parts[1])
        except ValueError:
            return key
        return f"R{row + 1}:C{column + 1}"
    return key


def button_label(key: str, info: ButtonInfo) -> str:
    return info.title or f"Button {format_button_key(key)}"


def sort_button_keys(keys: list[str]) -> list[str]:
    """Order keys row by row, then column; unparsable keys go last."""

    def sort_key(key: str) -> tuple[int, int, int, str]:
        parts = key.split(",")
        if len(parts) == 2 and all(p.strip().lstrip("-").isdigit() for p in parts):
            return (0, int(parts[1]), int(parts[0]), key)
        return (1, 0, 0, key)

    return sorted(keys, key=sort_key)
