"""Pydantic models for filter settings and inspection reports"""

from pathlib import PurePath

from pydantic import BaseModel, Field

from unityfilter.compression import DEFAULT_SEVEN_ZIP
from unityfilter.record import ParsedRecord
from unityfilter.utils import get_bool_env, get_int_env, get_list_env, get_str_env


class FilterSettings(BaseModel):
    """Runtime configuration for the clean/smudge filters"""

    seven_zip: str = Field(DEFAULT_SEVEN_ZIP, description='Compressor executable (7z compatible)')
    compress_threshold: int = Field(
        0, ge=0, description='Minimum transformed input size in bytes before clean compresses'
    )
    compress_extensions: list[str] = Field(
        default_factory=lambda: ['.unity'], description='Extensions that clean compresses with gzip'
    )
    disable_transforms: bool = Field(False, description='Only compress/decompress, never rewrite content')
    log_level: str = Field('WARNING', description='Logging level for stderr diagnostics')

    @classmethod
    def from_env(cls) -> 'FilterSettings':
        """Build settings from UNITYFILTER_* environment variables."""
        return cls(
            seven_zip=get_str_env('UNITYFILTER_SEVEN_ZIP', DEFAULT_SEVEN_ZIP),
            compress_threshold=max(0, get_int_env('UNITYFILTER_COMPRESS_THRESHOLD', 0)),
            compress_extensions=get_list_env('UNITYFILTER_COMPRESS_EXTENSIONS', ['.unity']),
            disable_transforms=get_bool_env('UNITYFILTER_DISABLE_TRANSFORMS', False),
            log_level=get_str_env('UNITYFILTER_LOG_LEVEL', 'WARNING'),
        )

    def should_compress(self, path: str) -> bool:
        """Check whether clean gzips files with this path's extension."""
        return PurePath(path).suffix in self.compress_extensions


class ObjectReferenceModel(BaseModel):
    """A Unity object reference"""

    file_id: str = Field(..., examples=['11500000'])
    guid: str | None = Field(None, examples=['0123456789abcdef0123456789abcdef'])
    type: str | None = Field(None, examples=['3'])


class InspectReport(BaseModel):
    """Fields extracted from a record and the rewrite decision taken for it"""

    path: str = Field(..., examples=['Assets/Udon/Door.asset'])
    is_yaml: bool = Field(..., description='File starts with a %YAML header')
    bytes_loaded: int = Field(..., description='Bytes parsed (capped at the record limit)')
    truncated: bool = Field(..., description='File is longer than the record limit')
    script_guid: str | None = Field(None, description='guid of the m_Script reference')
    object_name: str | None = Field(None, examples=['Door'])
    program_span: tuple[int, int] | None = Field(
        None, description='Byte range of the serializedUdonProgramAsset reference'
    )
    source_script: ObjectReferenceModel | None = None
    decision: str = Field(..., examples=['regenerate_as_stub'])
    reason: str = Field('', description='Why the record is left untouched')

    @classmethod
    def from_record(cls, path: str, record: ParsedRecord, is_yaml: bool) -> 'InspectReport':
        fields = record.fields
        source = fields.source_script
        return cls(
            path=path,
            is_yaml=is_yaml,
            bytes_loaded=len(record.buffer),
            truncated=not record.exhausted,
            script_guid=fields.script_guid,
            object_name=fields.object_name.decode('utf-8', errors='replace') if fields.object_name else None,
            program_span=(fields.program_span.start, fields.program_span.end) if fields.program_span else None,
            source_script=ObjectReferenceModel(file_id=source.file_id, guid=source.guid, type=source.type)
            if source
            else None,
            decision=record.decision.value,
            reason=record.reason,
        )
