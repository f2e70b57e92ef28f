"""Choose a transform from a file path, and the plain pass-through copy."""

import logging
from enum import Enum
from pathlib import PurePath
from typing import BinaryIO

from unityfilter.anchor import rewrite_program_references
from unityfilter.cursor import CHUNK_SIZE
from unityfilter.record import rewrite_record


logger = logging.getLogger(__name__)


class TransformKind(str, Enum):
    PASS_THROUGH = 'pass_through'
    ANCHOR_MATCHER = 'anchor_matcher'
    RECORD_PARSER = 'record_parser'


# Scenes and prefabs hold behaviour components, assets hold program assets
TRANSFORMS_BY_EXTENSION = {
    '.unity': TransformKind.ANCHOR_MATCHER,
    '.prefab': TransformKind.ANCHOR_MATCHER,
    '.asset': TransformKind.RECORD_PARSER,
}


def select_transform(path: str) -> TransformKind:
    """Map a path (or bare extension such as '.unity') to its transform.

    The comparison is on the final suffix and is case-sensitive.
    """
    suffix = path if path.startswith('.') and '/' not in path else PurePath(path).suffix
    return TRANSFORMS_BY_EXTENSION.get(suffix, TransformKind.PASS_THROUGH)


def pass_through(source: BinaryIO, output: BinaryIO) -> int:
    """Copy source to output without inspection.

    Returns:
        Number of bytes copied
    """
    copied = 0
    while True:
        chunk = source.read(CHUNK_SIZE)
        if not chunk:
            break
        output.write(chunk)
        output.flush()
        copied += len(chunk)
    return copied


def apply_transform(kind: TransformKind, source: BinaryIO, output: BinaryIO):
    """Run the transform for kind from source to output."""
    logger.debug(f'Applying {kind.value}')
    if kind == TransformKind.ANCHOR_MATCHER:
        rewrite_program_references(source, output)
    elif kind == TransformKind.RECORD_PARSER:
        rewrite_record(source, output)
    else:
        pass_through(source, output)
