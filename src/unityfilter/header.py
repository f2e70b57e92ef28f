"""YAML header gate shared by both transformers.

A Unity text asset starts with an optional UTF-8 byte order mark followed by
`%YAML`. Anything else (binary assets, non-YAML text) is left untouched.
"""

from unityfilter.cursor import ByteCursor, ByteSink


UTF8_BOM = b'\xef\xbb\xbf'
YAML_DIRECTIVE = b'%YAML'


def pass_header(cursor: ByteCursor, sink: ByteSink) -> bool:
    """Consume the BOM and `%YAML` directive from a stream, echoing them to sink.

    BOM bytes are checked one at a time; a partial BOM stays consumed and
    the check moves on to `%YAML`. Every consumed byte is written to sink
    whether or not the header matches.

    Returns:
        True if the stream starts with a YAML header
    """
    for expected in UTF8_BOM:
        if cursor.at_end() or cursor.peek_next() != expected:
            break
        sink.write_byte(cursor.consume_next())

    for expected in YAML_DIRECTIVE:
        if cursor.at_end() or cursor.peek_next() != expected:
            return False
        sink.write_byte(cursor.consume_next())
    return True


def match_header(buf: bytes) -> int | None:
    """Buffer version of pass_header.

    Returns:
        Offset just past `%YAML`, or None if buf does not start with a YAML header
    """
    pos = 0
    for expected in UTF8_BOM:
        if pos >= len(buf) or buf[pos] != expected:
            break
        pos += 1

    if not buf.startswith(YAML_DIRECTIVE, pos):
        return None
    return pos + len(YAML_DIRECTIVE)
