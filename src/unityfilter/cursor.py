"""Buffered byte cursor used by every streaming transformer.

The cursor wraps any binary source (stdin, a pipe, a BytesIO) and hands out
one byte at a time while refilling its buffer in large chunks. Scanning code
never touches the underlying source once it has been wrapped.

Also provides:
- Checkpoint: a transactional read on top of a cursor. Bytes consumed while
  attempting a match are kept until the attempt is committed (dropped) or
  rolled back (replayed to the output).
- ByteSink: an output buffer that batches single-byte writes.
"""

import logging
from typing import BinaryIO


logger = logging.getLogger(__name__)

# Refill size for cursors and pass-through copies
CHUNK_SIZE = 1024 * 1024


class ByteCursor:
    """Chunked reader exposing peek/consume over a byte source.

    Invariants:
    - position <= len(buffer) at all times
    - a refill is attempted whenever position reaches the end of the buffer
    - once the source reports end of stream the cursor stays exhausted
    """

    def __init__(self, source: BinaryIO, chunk_size: int = CHUNK_SIZE):
        self._source = source
        self._chunk_size = chunk_size
        # Prefer read1() so a pipe returns whatever is available instead of
        # blocking until a full chunk arrives
        self._read = getattr(source, 'read1', source.read)
        self._buffer = b''
        self._position = 0
        self._exhausted = False
        self.bytes_read = 0

    def _refill(self) -> bool:
        """Load the next chunk if the buffer is drained. Returns True if bytes are available."""
        if self._position < len(self._buffer):
            return True
        if self._exhausted:
            return False

        chunk = self._read(self._chunk_size)
        if not chunk:
            self._exhausted = True
            self._buffer = b''
            self._position = 0
            logger.debug(f'Source exhausted after {self.bytes_read} bytes')
            return False

        self.bytes_read += len(chunk)
        self._buffer = chunk
        self._position = 0
        return True

    def at_end(self) -> bool:
        """Report whether the stream is exhausted, refilling first if needed."""
        return not self._refill()

    def peek_next(self) -> int:
        """Return the next byte without consuming it.

        Raises:
            EOFError: If the stream is exhausted. Callers must check at_end() first.
        """
        if not self._refill():
            raise EOFError('peek past end of stream')
        return self._buffer[self._position]

    def consume_next(self) -> int:
        """Return the next byte and advance past it.

        Raises:
            EOFError: If the stream is exhausted. Callers must check at_end() first.
        """
        if not self._refill():
            raise EOFError('read past end of stream')
        value = self._buffer[self._position]
        self._position += 1
        return value

    def copy_until(self, value: int, sink: 'ByteSink') -> int:
        """Copy buffered bytes up to (not including) the next occurrence of value.

        Stops at the end of the current buffer, so it may return before value
        is reached. Returns the number of bytes copied.
        """
        if not self._refill():
            return 0
        stop = self._buffer.find(value, self._position)
        if stop == -1:
            stop = len(self._buffer)
        copied = stop - self._position
        if copied:
            sink.write(self._buffer[self._position : stop])
            self._position = stop
        return copied

    def take_buffered(self) -> bytes:
        """Consume and return whatever is left in the internal buffer."""
        rest = self._buffer[self._position :]
        self._buffer = b''
        self._position = 0
        return rest

    def copy_remaining(self, sink: 'ByteSink') -> int:
        """Copy the rest of the stream to sink verbatim.

        Returns:
            Number of bytes copied
        """
        copied = 0
        while self._refill():
            rest = self.take_buffered()
            sink.write(rest)
            copied += len(rest)
        return copied


class ByteSink:
    """Batches writes to a binary output and flushes in CHUNK_SIZE blocks."""

    def __init__(self, output: BinaryIO, flush_size: int = CHUNK_SIZE):
        self._output = output
        self._flush_size = flush_size
        self._pending = bytearray()
        self.bytes_written = 0

    def write_byte(self, value: int):
        self._pending.append(value)
        if len(self._pending) >= self._flush_size:
            self.flush()

    def write(self, data: bytes | bytearray):
        if not data:
            return
        self._pending += data
        if len(self._pending) >= self._flush_size:
            self.flush()

    def flush(self):
        if self._pending:
            self._output.write(self._pending)
            self.bytes_written += len(self._pending)
            self._pending = bytearray()
        self._output.flush()


class Checkpoint:
    """Transactional read over a ByteCursor.

    Every byte taken through the checkpoint is remembered. commit() forgets
    them (the match replaced them), rollback() writes them to a sink so the
    output keeps the original bytes.
    """

    def __init__(self, cursor: ByteCursor):
        self.cursor = cursor
        self.pending = bytearray()

    def peek(self) -> int | None:
        """Next byte, or None at end of stream."""
        if self.cursor.at_end():
            return None
        return self.cursor.peek_next()

    def take(self) -> int:
        value = self.cursor.consume_next()
        self.pending.append(value)
        return value

    def take_if(self, expected: int) -> bool:
        """Consume the next byte only if it equals expected."""
        if self.peek() != expected:
            return False
        self.take()
        return True

    def commit(self) -> bytes:
        taken = bytes(self.pending)
        self.pending.clear()
        return taken

    def rollback(self, sink: ByteSink) -> int:
        count = len(self.pending)
        sink.write(self.pending)
        self.pending = bytearray()
        return count
