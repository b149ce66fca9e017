"""
csv_parser.py
-------------

Tokenize raw statement exports into rows of string cells.

The scanner is deliberately forgiving: rows may have different cell
counts, quoted cells may span lines, and rows with nothing but
whitespace are dropped.  Column alignment is left to the mapping step,
which looks cells up by header position.
"""

from __future__ import annotations

from typing import List


def _has_values(row: List[str]) -> bool:
    return any(cell.strip() for cell in row)


def parse_csv(text: str) -> List[List[str]]:
    """Split delimited ``text`` into rows of cells.

    Inside quotes a doubled quote emits a literal ``"`` and commas or
    newlines are kept as cell content.  Outside quotes a comma ends the
    cell and ``\\n``, ``\\r`` or ``\\r\\n`` ends the row.
    """
    rows: List[List[str]] = []
    row: List[str] = []
    current: List[str] = []
    in_quotes = False

    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if in_quotes:
            if char == '"' and nxt == '"':
                current.append('"')
                i += 2
                continue
            if char == '"':
                in_quotes = False
            else:
                current.append(char)
            i += 1
            continue

        if char == '"':
            in_quotes = True
        elif char == ",":
            row.append("".join(current))
            current = []
        elif char in ("\n", "\r"):
            if char == "\r" and nxt == "\n":
                i += 1
            row.append("".join(current))
            if _has_values(row):
                rows.append(row)
            row = []
            current = []
        else:
            current.append(char)
        i += 1

    if current or row:
        row.append("".join(current))
        if _has_values(row):
            rows.append(row)

    return rows
