"""Small hand-written scanners over an in-memory byte buffer.

Each scanner takes the buffer and a start position and returns the position
just past what it matched, or None when the shape is not present. Nothing
here raises on malformed input.

Shapes:
- whitespace runs (YAML whitespace, or horizontal only)
- literals and `name:` keys
- decimal, hexadecimal and alphanumeric runs
- single-level brace captures `{...}`
- inline `guid: <hex>` and `fileID: N[, guid: G, type: T]` extraction
"""

from dataclasses import dataclass


# Bytes accepted by every optional-whitespace gap
WHITESPACE = frozenset(b' \t\v\r\n')
HORIZONTAL_SPACE = frozenset(b' \t')

DIGITS = frozenset(b'0123456789')
HEX_DIGITS = frozenset(b'0123456789abcdefABCDEF')
ALNUM = frozenset(b'0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ')

OPEN_BRACE = ord('{')
COLON = ord(':')
COMMA = ord(',')


@dataclass
class ObjectReference:
    """A Unity object reference `{fileID: N, guid: G, type: T}`.

    guid and type are None for the short `{fileID: N}` form.
    """

    file_id: str
    guid: str | None = None
    type: str | None = None

    @property
    def is_null(self) -> bool:
        """A zero fileID means "no reference"."""
        return self.file_id == '0'


def skip_run(buf: bytes, pos: int, allowed: frozenset) -> int:
    """Advance past any bytes in allowed. Never fails."""
    end = len(buf)
    while pos < end and buf[pos] in allowed:
        pos += 1
    return pos


def skip_whitespace(buf: bytes, pos: int) -> int:
    return skip_run(buf, pos, WHITESPACE)


def skip_horizontal(buf: bytes, pos: int) -> int:
    return skip_run(buf, pos, HORIZONTAL_SPACE)


def scan_nonempty_run(buf: bytes, pos: int, allowed: frozenset) -> int | None:
    """Like skip_run but requires at least one byte."""
    end = skip_run(buf, pos, allowed)
    if end == pos:
        return None
    return end


def scan_decimal(buf: bytes, pos: int) -> int | None:
    return scan_nonempty_run(buf, pos, DIGITS)


def scan_hex(buf: bytes, pos: int) -> int | None:
    return scan_nonempty_run(buf, pos, HEX_DIGITS)


def match_literal(buf: bytes, pos: int, literal: bytes) -> int | None:
    if buf.startswith(literal, pos):
        return pos + len(literal)
    return None


def match_byte(buf: bytes, pos: int, value: int) -> int | None:
    if pos < len(buf) and buf[pos] == value:
        return pos + 1
    return None


def match_key(buf: bytes, pos: int, name: bytes) -> int | None:
    """Match `name`, optional horizontal whitespace and `:`. Case-sensitive."""
    pos = match_literal(buf, pos, name)
    if pos is None:
        return None
    return match_byte(buf, skip_horizontal(buf, pos), COLON)


def match_separator(buf: bytes, pos: int, value: int) -> int | None:
    """Match a single punctuation byte surrounded by optional whitespace."""
    pos = match_byte(buf, skip_whitespace(buf, pos), value)
    if pos is None:
        return None
    return skip_whitespace(buf, pos)


def capture_braces(buf: bytes, pos: int) -> tuple[int, int] | None:
    """Capture a single-level `{...}` starting at pos.

    The first `}` after the opening brace closes the capture, nested braces
    are not balanced.

    Returns:
        (open_offset, close_offset_exclusive) or None if pos is not `{` or
        the closing brace is not in the buffer
    """
    if match_byte(buf, pos, OPEN_BRACE) is None:
        return None
    close = buf.find(b'}', pos + 1)
    if close == -1:
        return None
    return pos, close + 1


def capture_line(buf: bytes, pos: int, allow_unterminated: bool) -> tuple[int, int] | None:
    """Capture from pos up to the next CR or LF.

    Args:
        allow_unterminated: Accept a capture that runs to the end of the
            buffer (only safe when the buffer holds the whole stream)
    """
    end = len(buf)
    cursor = pos
    while cursor < end and buf[cursor] not in (0x0A, 0x0D):
        cursor += 1
    if cursor == end and not allow_unterminated:
        return None
    return pos, cursor


def _scan_guid_at(buf: bytes, pos: int) -> str | None:
    pos = match_literal(buf, pos, b'guid')
    if pos is None:
        return None
    pos = match_separator(buf, pos, COLON)
    if pos is None:
        return None
    end = scan_nonempty_run(buf, pos, ALNUM)
    if end is None:
        return None
    return buf[pos:end].decode('ascii').lower()


def find_guid(content: bytes) -> str | None:
    """Find the first `guid: <alnum>` in content, lower-cased."""
    start = content.find(b'guid')
    while start != -1:
        guid = _scan_guid_at(content, start)
        if guid is not None:
            return guid
        start = content.find(b'guid', start + 1)
    return None


def _scan_labelled(buf: bytes, pos: int, label: bytes, scanner) -> tuple[int, int] | None:
    """Match `label: <run>` and return the run's (start, end)."""
    pos = match_literal(buf, pos, label)
    if pos is None:
        return None
    pos = match_separator(buf, pos, COLON)
    if pos is None:
        return None
    end = scanner(buf, pos)
    if end is None:
        return None
    return pos, end


def _scan_reference_at(buf: bytes, pos: int) -> ObjectReference | None:
    file_id = _scan_labelled(buf, pos, b'fileID', scan_decimal)
    if file_id is None:
        return None
    reference = ObjectReference(file_id=buf[file_id[0] : file_id[1]].decode('ascii'))

    # Optional `, guid: G, type: T` tail; a partial tail counts as absent
    tail = match_separator(buf, file_id[1], COMMA)
    guid = _scan_labelled(buf, tail, b'guid', scan_hex) if tail is not None else None
    tail = match_separator(buf, guid[1], COMMA) if guid is not None else None
    type_ = _scan_labelled(buf, tail, b'type', scan_decimal) if tail is not None else None
    if guid is not None and type_ is not None:
        reference.guid = buf[guid[0] : guid[1]].decode('ascii')
        reference.type = buf[type_[0] : type_[1]].decode('ascii')
    return reference


def find_object_reference(content: bytes) -> ObjectReference | None:
    """Find the first `fileID: N[, guid: G, type: T]` in content."""
    start = content.find(b'fileID')
    while start != -1:
        reference = _scan_reference_at(content, start)
        if reference is not None:
            return reference
        start = content.find(b'fileID', start + 1)
    return None
