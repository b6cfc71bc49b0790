"""
Quote-aware CSV line tokenizer.

A small state machine, independent of the record schema:
- a double quote toggles the "inside quotes" state
- inside quotes, a doubled quote ("") is a literal quote character
- a comma outside quotes ends the current field
- every field is stripped of surrounding whitespace

Lines are tokenized one at a time; a quoted field never spans lines.
An unbalanced quote simply runs to the end of the line.
"""

QUOTE = '"'
SEPARATOR = ","


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    i = 0
    length = len(line)
    while i < length:
        char = line[i]
        if char == QUOTE:
            if in_quotes and i + 1 < length and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == SEPARATOR and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields


def split_csv_lines(text: str) -> list[str]:
    """Physical lines of a CSV document, with blank lines dropped."""
    return [line for line in text.splitlines() if line.strip()]
