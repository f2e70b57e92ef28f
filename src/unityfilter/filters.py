"""git clean/smudge pipelines.

clean (working tree -> repository):
    transform selected by extension, then gzip through 7z for extensions
    configured for compression once the input reaches the size threshold.

smudge (repository -> working tree):
    gunzip through 7z when the stored blob starts with the gzip signature,
    otherwise copy it unchanged. Blobs committed before compression was
    enabled therefore still check out.
"""

import logging
from functools import partial
from typing import BinaryIO

from unityfilter.compression import (
    CompressionFormat,
    compress_stream,
    decompress_stream,
    detect_compression,
)
from unityfilter.models import FilterSettings
from unityfilter.peek import PeekableStream
from unityfilter.selector import TransformKind, apply_transform, pass_through, select_transform


logger = logging.getLogger(__name__)


def clean(path: str, source: BinaryIO, output: BinaryIO, settings: FilterSettings | None = None):
    """Run the clean filter for path from source to output.

    Raises:
        RuntimeError: If the compressor cannot be started or fails
    """
    settings = settings or FilterSettings.from_env()
    kind = TransformKind.PASS_THROUGH if settings.disable_transforms else select_transform(path)

    if not settings.should_compress(path):
        logger.info(f'clean {path}: {kind.value}')
        apply_transform(kind, source, output)
        return

    stream = PeekableStream(source)
    if detect_compression(stream) != CompressionFormat.NONE:
        logger.info(f'clean {path}: input is already compressed, passing through')
        pass_through(stream, output)
        return

    if not stream.reaches(settings.compress_threshold):
        logger.info(f'clean {path}: below {settings.compress_threshold} bytes, {kind.value} without compression')
        apply_transform(kind, stream, output)
        return

    logger.info(f'clean {path}: {kind.value} + gzip')
    compress_stream(partial(apply_transform, kind, stream), output, settings.seven_zip)


def smudge(path: str, source: BinaryIO, output: BinaryIO, settings: FilterSettings | None = None):
    """Run the smudge filter for path from source to output.

    Raises:
        RuntimeError: If the decompressor cannot be started or fails
    """
    settings = settings or FilterSettings.from_env()
    stream = PeekableStream(source)

    compression_format = detect_compression(stream)
    if settings.should_compress(path) and compression_format == CompressionFormat.GZIP:
        logger.info(f'smudge {path}: gunzip')
        decompress_stream(stream, output, settings.seven_zip)
        return

    logger.info(f'smudge {path}: pass-through ({compression_format.value})')
    pass_through(stream, output)
