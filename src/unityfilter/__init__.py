"""unityfilter - git clean/smudge filter for Unity YAML scenes and assets.

Rewrites build-generated references in serialized Unity records so that
checked-in copies stay stable, and optionally gzips large scene files.
"""

from unityfilter.__version__ import __version__
from unityfilter.anchor import rewrite_program_references
from unityfilter.record import TransformDecision, parse_record, rewrite_record
from unityfilter.selector import TransformKind, select_transform


__all__ = [
    '__version__',
    'TransformDecision',
    'TransformKind',
    'parse_record',
    'rewrite_program_references',
    'rewrite_record',
    'select_transform',
]
