"""Streaming rewrite of serialized program references in scenes and prefabs.

Scene and prefab files store, on every Udon behaviour, a reference to the
program asset compiled for it:

    serializedProgramAsset: {fileID: 11400000, guid: 9eb6bf22b7b45af1d8ef5e8652d24b03, type: 2}

The guid changes whenever the project is rebuilt, so the clean filter
replaces the whole reference with the null form `{fileID: 0}`.

The scan works on a stream of any size:
- every byte is echoed to the output as soon as it is read
- a rolling index tracks how much of the anchor literal has been seen
- after a full anchor, the reference grammar is matched through a
  Checkpoint; a match is replaced, a mismatch replays the checkpointed
  bytes untouched and scanning resumes at the byte that failed
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO

from unityfilter.cursor import ByteCursor, ByteSink, Checkpoint
from unityfilter.header import pass_header
from unityfilter.scanners import DIGITS, HEX_DIGITS, WHITESPACE


logger = logging.getLogger(__name__)

ANCHOR = b'serializedProgramAsset'
REPLACEMENT = b': {fileID: 0}'


@dataclass
class AnchorRewriteResult:
    """Counters for one pass of the anchor matcher."""

    is_yaml: bool = False
    anchors_found: int = 0
    replaced: int = 0
    bytes_in: int = 0
    bytes_out: int = 0


def _skip_whitespace(checkpoint: Checkpoint) -> bool:
    while checkpoint.peek() in WHITESPACE:
        checkpoint.take()
    return True


def _expect(literal: bytes, checkpoint: Checkpoint) -> bool:
    for expected in literal:
        if not checkpoint.take_if(expected):
            return False
    return True


def _expect_run(allowed: frozenset, checkpoint: Checkpoint) -> bool:
    count = 0
    while checkpoint.peek() in allowed:
        checkpoint.take()
        count += 1
    return count > 0


_ws = _skip_whitespace

# `: {fileID: N, guid: G, type: T}` with optional whitespace between tokens
REFERENCE_GRAMMAR = (
    _ws,
    partial(_expect, b':'),
    _ws,
    partial(_expect, b'{'),
    _ws,
    partial(_expect, b'fileID'),
    _ws,
    partial(_expect, b':'),
    _ws,
    partial(_expect_run, DIGITS),
    _ws,
    partial(_expect, b','),
    _ws,
    partial(_expect, b'guid'),
    _ws,
    partial(_expect, b':'),
    _ws,
    partial(_expect_run, HEX_DIGITS),
    _ws,
    partial(_expect, b','),
    _ws,
    partial(_expect, b'type'),
    _ws,
    partial(_expect, b':'),
    _ws,
    partial(_expect_run, DIGITS),
    _ws,
    partial(_expect, b'}'),
)


def match_reference(checkpoint: Checkpoint) -> bool:
    """Run every grammar step in order, stopping at the first failure.

    Steps only consume bytes they accept, so on failure the byte that broke
    the match is still unread.
    """
    for step in REFERENCE_GRAMMAR:
        if not step(checkpoint):
            return False
    return True


def rewrite_program_references(
    source: BinaryIO,
    output: BinaryIO,
    anchor: bytes = ANCHOR,
    replacement: bytes = REPLACEMENT,
) -> AnchorRewriteResult:
    """Copy source to output, nulling every `<anchor>: {fileID, guid, type}` reference.

    Streams without a YAML header are copied verbatim. Output is
    byte-identical to input outside of replaced spans.

    Args:
        source: Binary input stream
        output: Binary output stream
        anchor: Literal that must directly precede the reference
        replacement: Bytes written in place of the matched reference

    Returns:
        AnchorRewriteResult with match counters
    """
    cursor = ByteCursor(source)
    sink = ByteSink(output)
    result = AnchorRewriteResult()

    if not pass_header(cursor, sink):
        logger.debug('No %YAML header, passing stream through')
        cursor.copy_remaining(sink)
        sink.flush()
        result.bytes_in = cursor.bytes_read
        result.bytes_out = sink.bytes_written
        return result

    result.is_yaml = True
    first = anchor[0]
    matched = 0

    while not cursor.at_end():
        if matched == 0:
            # Nothing in progress: bulk copy up to the next possible anchor start
            if cursor.copy_until(first, sink):
                continue

        value = cursor.consume_next()
        sink.write_byte(value)
        if value == anchor[matched]:
            matched += 1
        else:
            matched = 0

        if matched < len(anchor):
            continue

        matched = 0
        result.anchors_found += 1
        checkpoint = Checkpoint(cursor)
        if match_reference(checkpoint):
            checkpoint.commit()
            sink.write(replacement)
            result.replaced += 1
        else:
            checkpoint.rollback(sink)

    sink.flush()
    result.bytes_in = cursor.bytes_read
    result.bytes_out = sink.bytes_written
    logger.debug(
        f'Anchor scan done: {result.anchors_found} anchors, {result.replaced} replaced, '
        f'{result.bytes_in} bytes in, {result.bytes_out} bytes out'
    )
    return result
