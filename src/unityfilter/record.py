"""Bounded field parser for program asset records.

Program assets (`.asset`) are classified by the guid of their `m_Script`
reference:

- Udon program assets keep a `serializedUdonProgramAsset` reference to a
  build artifact. That reference is spliced to `{fileID: 0}`.
- UdonSharp program assets carry compiled output that is fully derived from
  their source script. The whole record is regenerated from `m_Name` and
  `sourceCsScript` alone.
- Anything else is left untouched.

Only the first RECORD_LIMIT bytes are parsed. Whenever the record is not
transformed, exactly the loaded bytes are written back, followed by the
unread remainder of the stream.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO

from unityfilter.cursor import CHUNK_SIZE, ByteCursor, ByteSink
from unityfilter.header import match_header
from unityfilter.scanners import (
    HORIZONTAL_SPACE,
    ObjectReference,
    capture_braces,
    capture_line,
    find_guid,
    find_object_reference,
    match_key,
    skip_horizontal,
)
from unityfilter.templates import render_program_asset_stub


logger = logging.getLogger(__name__)

RECORD_LIMIT = 128 * 1024

SCRIPT_FIELD = b'm_Script'
NAME_FIELD = b'm_Name'
PROGRAM_FIELD = b'serializedUdonProgramAsset'
SOURCE_FIELD = b'sourceCsScript'

# m_Script guids of the two record kinds that are rewritten
UDON_PROGRAM_ASSET_GUID = '22203902d63dec94194fefc3e155c43b'
UDON_SHARP_PROGRAM_ASSET_GUID = 'c333ccfdd0cbdbc4ca30cef2dd6e6b9b'

NULL_REFERENCE = b'{fileID: 0}'

LINE_FEED = 0x0A
LINE_START_SKIP = HORIZONTAL_SPACE | {0x0D}


class TransformDecision(str, Enum):
    UNMODIFIED = 'unmodified'
    ZERO_PROGRAM_REFERENCE = 'zero_program_reference'
    REGENERATE_AS_STUB = 'regenerate_as_stub'


@dataclass
class ByteSpan:
    """Half-open byte range inside the loaded buffer."""

    start: int
    end: int


@dataclass
class RecordFields:
    """Fields extracted from one record. Each is set at most once."""

    script_guid: str | None = None
    object_name: bytes | None = None
    program_span: ByteSpan | None = None
    source_script: ObjectReference | None = None

    def is_set(self, name: bytes) -> bool:
        return {
            SCRIPT_FIELD: self.script_guid,
            NAME_FIELD: self.object_name,
            PROGRAM_FIELD: self.program_span,
            SOURCE_FIELD: self.source_script,
        }[name] is not None


@dataclass
class ParsedRecord:
    """Result of parsing the loaded prefix of a record."""

    buffer: bytes
    exhausted: bool
    fields: RecordFields = field(default_factory=RecordFields)
    decision: TransformDecision = TransformDecision.UNMODIFIED
    reason: str = ''


@dataclass
class RecordRewriteResult:
    decision: TransformDecision
    reason: str
    bytes_out: int


def load_prefix(source: BinaryIO, limit: int = RECORD_LIMIT) -> tuple[bytes, bool]:
    """Read up to limit bytes.

    Returns:
        (data, exhausted) where exhausted is True if the stream ended before the limit
    """
    parts = []
    loaded = 0
    while loaded < limit:
        chunk = source.read(limit - loaded)
        if not chunk:
            return b''.join(parts), True
        parts.append(chunk)
        loaded += len(chunk)
    return b''.join(parts), False


def _read_script(buf: bytes, pos: int, fields: RecordFields) -> int | None:
    span = capture_braces(buf, skip_horizontal(buf, pos))
    if span is None:
        return None
    fields.script_guid = find_guid(buf[span[0] : span[1]])
    return span[1]


def _read_name(buf: bytes, pos: int, fields: RecordFields, exhausted: bool) -> int | None:
    span = capture_line(buf, skip_horizontal(buf, pos), allow_unterminated=exhausted)
    if span is None:
        return None
    if span[1] > span[0]:
        fields.object_name = buf[span[0] : span[1]]
    return span[1]


def _read_program(buf: bytes, pos: int, fields: RecordFields) -> int | None:
    span = capture_braces(buf, skip_horizontal(buf, pos))
    if span is None:
        return None
    fields.program_span = ByteSpan(*span)
    return span[1]


def _read_source(buf: bytes, pos: int, fields: RecordFields) -> int | None:
    span = capture_braces(buf, skip_horizontal(buf, pos))
    if span is None:
        return None
    fields.source_script = find_object_reference(buf[span[0] : span[1]])
    return span[1]


def _read_field(buf: bytes, pos: int, fields: RecordFields, exhausted: bool) -> int | None:
    """Try each known field at a line start. Returns the position after the consumed field."""
    for name in (SCRIPT_FIELD, NAME_FIELD, PROGRAM_FIELD, SOURCE_FIELD):
        if fields.is_set(name):
            continue
        value_pos = match_key(buf, pos, name)
        if value_pos is None:
            continue

        if name == SCRIPT_FIELD:
            return _read_script(buf, value_pos, fields)
        if name == NAME_FIELD:
            return _read_name(buf, value_pos, fields, exhausted)
        if name == PROGRAM_FIELD:
            return _read_program(buf, value_pos, fields)
        return _read_source(buf, value_pos, fields)
    return None


def scan_fields(buf: bytes, start: int, exhausted: bool) -> tuple[RecordFields, bool]:
    """Scan line starts from start for the known fields.

    Returns:
        (fields, aborted) where aborted is True when m_Script names a script
        that is not transformed
    """
    fields = RecordFields()
    known = (UDON_PROGRAM_ASSET_GUID, UDON_SHARP_PROGRAM_ASSET_GUID)
    end = len(buf)
    pos = start
    at_line_start = False

    while pos < end:
        value = buf[pos]
        if value == LINE_FEED:
            at_line_start = True
            pos += 1
            continue
        if not at_line_start:
            pos += 1
            continue
        if value in LINE_START_SKIP:
            pos += 1
            continue

        at_line_start = False
        had_script = fields.script_guid is not None
        next_pos = _read_field(buf, pos, fields, exhausted)
        if not had_script and fields.script_guid is not None and fields.script_guid not in known:
            logger.debug(f'm_Script guid {fields.script_guid} is not a program asset')
            return fields, True
        pos = next_pos if next_pos is not None else pos + 1

    return fields, False


def parse_record(buf: bytes, exhausted: bool) -> ParsedRecord:
    """Parse a loaded record prefix and decide how to rewrite it."""
    record = ParsedRecord(buffer=buf, exhausted=exhausted)

    start = match_header(buf)
    if start is None:
        record.reason = 'no %YAML header'
        return record

    record.fields, aborted = scan_fields(buf, start, exhausted)
    fields = record.fields
    if aborted:
        record.reason = f'm_Script guid {fields.script_guid} is not transformed'
    elif fields.script_guid is None:
        record.reason = 'no m_Script reference'
    elif fields.script_guid == UDON_PROGRAM_ASSET_GUID:
        if fields.program_span is None:
            record.reason = 'serializedUdonProgramAsset not found'
        else:
            record.decision = TransformDecision.ZERO_PROGRAM_REFERENCE
    elif fields.object_name is None:
        record.reason = 'm_Name not found'
    elif fields.source_script is None:
        record.reason = 'sourceCsScript fileID not found'
    else:
        record.decision = TransformDecision.REGENERATE_AS_STUB
    return record


def _drain(source: BinaryIO):
    """Read and discard the rest of source so the writer upstream is not blocked."""
    while source.read(CHUNK_SIZE):
        pass


def rewrite_record(source: BinaryIO, output: BinaryIO, limit: int = RECORD_LIMIT) -> RecordRewriteResult:
    """Apply the record transform from source to output.

    Args:
        source: Binary input stream
        output: Binary output stream
        limit: Maximum number of bytes parsed

    Returns:
        RecordRewriteResult with the decision taken
    """
    buf, exhausted = load_prefix(source, limit)
    record = parse_record(buf, exhausted)
    sink = ByteSink(output)

    if record.decision == TransformDecision.REGENERATE_AS_STUB:
        fields = record.fields
        sink.write(render_program_asset_stub(fields.object_name, fields.source_script, fields.script_guid))
        if not exhausted:
            # The stub replaces the whole original object, unread bytes are dropped
            _drain(source)
    elif record.decision == TransformDecision.ZERO_PROGRAM_REFERENCE:
        span = record.fields.program_span
        sink.write(buf[: span.start])
        sink.write(NULL_REFERENCE)
        sink.write(buf[span.end :])
        if not exhausted:
            ByteCursor(source).copy_remaining(sink)
    else:
        logger.debug(f'Record left untouched: {record.reason}')
        sink.write(buf)
        if not exhausted:
            ByteCursor(source).copy_remaining(sink)

    sink.flush()
    logger.debug(f'Record decision: {record.decision.value}')
    return RecordRewriteResult(decision=record.decision, reason=record.reason, bytes_out=sink.bytes_written)
