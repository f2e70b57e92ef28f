"""Compression detection and the external 7z (gzip) process.

Large scenes are stored gzipped in the repository. Compression itself is
delegated to `7z`, driven through stdin/stdout pipes. Because both pipes
are bounded, input and output are pumped by two threads at once; a single
thread writing everything before reading would deadlock.
"""

import logging
import subprocess
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from functools import partial
from typing import BinaryIO

from unityfilter.peek import PeekableStream
from unityfilter.selector import pass_through


logger = logging.getLogger(__name__)

DEFAULT_SEVEN_ZIP = '7z'


class CompressionFormat(str, Enum):
    NONE = 'none'
    GZIP = 'gzip'
    ZSTD = 'zstd'
    XZ = 'xz'
    BZ2 = 'bz2'


MAGIC_BYTES = {
    CompressionFormat.GZIP: b'\x1f\x8b\x08',
    CompressionFormat.ZSTD: b'\x28\xb5\x2f\xfd',
    CompressionFormat.XZ: b'\xfd7zXZ\x00',
    CompressionFormat.BZ2: b'BZh',
}
MAGIC_SIZE = max(len(magic) for magic in MAGIC_BYTES.values())


def detect_compression_bytes(header: bytes) -> CompressionFormat:
    """Classify a stream from its first bytes."""
    for compression_format, magic in MAGIC_BYTES.items():
        if header.startswith(magic):
            return compression_format
    return CompressionFormat.NONE


def detect_compression(stream: PeekableStream) -> CompressionFormat:
    """Sniff the magic bytes of stream without consuming them."""
    return detect_compression_bytes(stream.peek(MAGIC_SIZE))


def seven_zip_command(executable: str, compress: bool) -> list[str]:
    """Build the 7z command line for gzip on stdin/stdout."""
    action = 'a' if compress else 'x'
    return [executable, action, '-si', '-so', '-an', '-tgzip']


def run_process_filter(command: list[str], feed: Callable[[BinaryIO], object], output: BinaryIO) -> int:
    """Run command as a filter: feed() writes its stdin, its stdout is copied to output.

    Both directions run on their own thread and are joined before the
    process is waited for.

    Raises:
        RuntimeError: If the process cannot be started or exits with a non-zero status
    """
    try:
        process = subprocess.Popen(command, stdin=subprocess.PIPE, stdout=subprocess.PIPE)
    except OSError as e:
        raise RuntimeError(f'Failed to start {command[0]} (seven zip) process: {e}') from e

    logger.info(f'Started {" ".join(command)} (pid {process.pid})')

    def pump_input():
        try:
            feed(process.stdin)
        finally:
            process.stdin.close()

    def pump_output():
        return pass_through(process.stdout, output)

    with ThreadPoolExecutor(max_workers=2) as executor:
        input_future = executor.submit(pump_input)
        output_future = executor.submit(pump_output)
        try:
            input_future.result()
            copied = output_future.result()
        finally:
            return_code = process.wait()
            process.stdout.close()

    if return_code != 0:
        logger.error(f'{command[0]} exited with status {return_code}')
        raise RuntimeError(f'{command[0]} exited with status {return_code}')

    logger.info(f'{command[0]} finished, {copied} bytes written')
    return copied


def compress_stream(
    feed: Callable[[BinaryIO], object],
    output: BinaryIO,
    executable: str = DEFAULT_SEVEN_ZIP,
) -> int:
    """Gzip whatever feed() writes, sending the compressed bytes to output."""
    return run_process_filter(seven_zip_command(executable, compress=True), feed, output)


def decompress_stream(source: BinaryIO, output: BinaryIO, executable: str = DEFAULT_SEVEN_ZIP) -> int:
    """Gunzip source to output."""
    return run_process_filter(seven_zip_command(executable, compress=False), partial(pass_through, source), output)
