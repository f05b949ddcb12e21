"""
Plain text persistence of share collections.

Layout, one record per line::

    <units>                     text secrets
    <width> <height> <units>    image secrets
    <share count>               repeated for every unit
    <x> <y>                     repeated share count times

Units appear in secret order and shares in the order they were generated.
"""
import logging
import re

from sss_core import Share
from sss_errors import ParseError

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"[0-9]+")


def save_shares(secret_shares, width=None, height=None):
    """
    Serialize share sets, plus image dimensions when given.

    Args:
        secret_shares: List of share lists, one per unit
        width: Image width, or None for text secrets
        height: Image height, or None for text secrets

    Returns:
        The persisted text, terminated by a newline
    """
    if (width is None) != (height is None):
        raise ValueError("Width and height must be given together")

    if width is None:
        lines = [str(len(secret_shares))]
    else:
        lines = [f"{width} {height} {len(secret_shares)}"]

    for shares in secret_shares:
        lines.append(str(len(shares)))
        for x, y in shares:
            lines.append(f"{x} {y}")

    return "\n".join(lines) + "\n"


def _parse_integers(lines, line_no, counts):
    if line_no >= len(lines):
        raise ParseError(f"Unexpected end of data at line {line_no + 1}", line=line_no + 1)

    tokens = lines[line_no].split()
    if len(tokens) not in counts:
        raise ParseError(
            f"Line {line_no + 1}: expected {' or '.join(map(str, counts))} integers, "
            f"got {lines[line_no]!r}",
            line=line_no + 1,
        )
    for token in tokens:
        if not _INTEGER.fullmatch(token):
            raise ParseError(
                f"Line {line_no + 1}: {token!r} is not a non-negative integer",
                line=line_no + 1,
            )
    return [int(token) for token in tokens]


def load_shares(text):
    """
    Parse persisted share text.

    Returns:
        tuple: (secret_shares, width, height); width and height are None for
        text records

    Raises:
        ParseError: on non-integer tokens, truncated data, share counts that do
            not match the lines present, or trailing data after the last unit
    """
    lines = text.splitlines()

    header = _parse_integers(lines, 0, (1, 3))
    if len(header) == 3:
        width, height, num_units = header
    else:
        width = height = None
        (num_units,) = header

    secret_shares = []
    line_no = 1
    for unit in range(num_units):
        (num_shares,) = _parse_integers(lines, line_no, (1,))
        line_no += 1

        shares = []
        for _ in range(num_shares):
            if line_no >= len(lines):
                raise ParseError(
                    f"Unit {unit} declares {num_shares} shares but data ends after {len(shares)}",
                    unit_index=unit,
                    line=line_no + 1,
                )
            x, y = _parse_integers(lines, line_no, (2,))
            shares.append(Share(x, y))
            line_no += 1
        secret_shares.append(shares)

    for extra in range(line_no, len(lines)):
        if lines[extra].strip():
            raise ParseError(
                f"Unexpected data after the last unit at line {extra + 1}", line=extra + 1
            )

    logger.debug("Loaded %d units", len(secret_shares))
    return secret_shares, width, height


def write_shares_file(path, secret_shares, width=None, height=None):
    with open(path, "w", encoding="utf-8") as share_file:
        share_file.write(save_shares(secret_shares, width, height))
    logger.info("Wrote %d units to %s", len(secret_shares), path)


def read_shares_file(path):
    with open(path, "rb") as share_file:
        data = share_file.read()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{path} is not UTF-8 text (byte offset {exc.start})") from exc
    return load_shares(text)
