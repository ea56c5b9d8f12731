"""Quote-aware splitting of a single CSV record."""

QUOTE = '"'
SEPARATOR = ","


def split_csv_line(line: str) -> list[str]:
    """Split one CSV line into trimmed fields.

    A double quote toggles the in-quotes state and is dropped; a comma only
    separates fields outside quotes. An unterminated quote simply leaves the
    rest of the line in the last field. Malformed quoting never raises.

    Args:
        line: A single CSV record without its line terminator.

    Returns:
        Field values with surrounding whitespace removed.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == SEPARATOR and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields
