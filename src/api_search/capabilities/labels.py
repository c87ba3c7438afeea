"""Spreadsheet-style option labels: A..Z, AA..AZ, BA.. and so on."""

import string

_LETTERS = string.ascii_uppercase


def index_to_label(index: int) -> str:
    """Map a zero-based option index to its label (0 -> A, 26 -> AA).

    Raises:
        ValueError: If ``index`` is negative.
    """
    if index < 0:
        raise ValueError(f"Option index must be non-negative, got {index}")
    label = ""
    while index >= 0:
        label = _LETTERS[index % 26] + label
        index = index // 26 - 1
    return label


def label_to_index(label: str) -> int:
    """Inverse of ``index_to_label``.

    Raises:
        ValueError: If ``label`` is empty or not uppercase ASCII letters.
    """
    if not label or any(ch not in _LETTERS for ch in label):
        raise ValueError(f"Invalid option label: {label!r}")
    index = 0
    for ch in label:
        index = index * 26 + (_LETTERS.index(ch) + 1)
    return index - 1
