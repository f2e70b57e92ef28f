"""Tests for the streaming serializedProgramAsset rewrite."""

import io

import pytest

from unityfilter.anchor import REPLACEMENT, rewrite_program_references


HEADER = b'%YAML 1.1\n%TAG !u! tag:unity3d.com,2011:\n'
REFERENCE = b': {fileID: 11400000, guid: 9eb6bf22b7b45af1d8ef5e8652d24b03, type: 2}'
BEHAVIOUR = (
    b'--- !u!114 &1234\n'
    b'MonoBehaviour:\n'
    b'  m_Enabled: 1\n'
    b'  serializedProgramAsset' + REFERENCE + b'\n'
    b'  programSource: {fileID: 11400000, guid: 0123456789abcdef0123456789abcdef, type: 2}\n'
)


class ChunkedSource(io.RawIOBase):
    """Source that never returns more than size bytes per read."""

    def __init__(self, data: bytes, size: int):
        self._data = data
        self._size = size
        self._pos = 0

    def readable(self):
        return True

    def read(self, size=-1):
        chunk = self._data[self._pos : self._pos + self._size]
        self._pos += len(chunk)
        return chunk


def run(data: bytes):
    output = io.BytesIO()
    result = rewrite_program_references(io.BytesIO(data), output)
    return output.getvalue(), result


class TestReplacement:
    """Tests for matched references."""

    def test_scene_reference_is_nulled(self):
        """Test that a program reference in a scene becomes {fileID: 0}."""
        out, result = run(HEADER + BEHAVIOUR)
        assert b'  serializedProgramAsset: {fileID: 0}\n' in out
        assert b'9eb6bf22b7b45af1d8ef5e8652d24b03' not in out
        assert b'programSource: {fileID: 11400000, guid: 0123456789abcdef0123456789abcdef, type: 2}' in out
        assert result.is_yaml
        assert result.replaced == 1

    def test_output_length_accounts_for_every_match(self):
        """Test the output size for several matched references."""
        data = HEADER + BEHAVIOUR * 5
        out, result = run(data)
        assert result.replaced == 5
        assert out.count(REPLACEMENT) == 5
        assert REFERENCE not in out
        assert len(out) == len(data) - 5 * len(REFERENCE) + 5 * len(REPLACEMENT)

    def test_compact_and_spacious_forms(self):
        """Test optional whitespace around every token."""
        compact = b'serializedProgramAsset:{fileID:1,guid:AbC,type:2}'
        spacious = b'serializedProgramAsset \t:\r\n {  fileID :  1 ,\n guid : abc , type : 2 \n}'
        out, result = run(HEADER + compact + b'\n' + spacious + b'\n')
        assert out == HEADER + b'serializedProgramAsset: {fileID: 0}\n' * 2
        assert result.replaced == 2

    def test_bom_before_header(self):
        """Test that a UTF-8 BOM is accepted and preserved."""
        out, result = run(b'\xef\xbb\xbf' + HEADER + BEHAVIOUR)
        assert out.startswith(b'\xef\xbb\xbf%YAML')
        assert result.replaced == 1

    def test_match_across_small_reads(self):
        """Test that read boundaries inside the anchor or grammar do not matter."""
        output = io.BytesIO()
        result = rewrite_program_references(ChunkedSource(HEADER + BEHAVIOUR * 3, 7), output)
        out = output.getvalue()
        assert result.replaced == 3
        assert out.count(b'serializedProgramAsset: {fileID: 0}') == 3

    def test_anchor_after_mismatch_on_new_line(self):
        """Test that matching starts over cleanly after a failed partial anchor."""
        out, result = run(HEADER + b'  serializedP\n  serializedProgramAsset' + REFERENCE)
        assert out == HEADER + b'  serializedP\n  serializedProgramAsset: {fileID: 0}'
        assert result.replaced == 1


class TestRollingIndex:
    """Tests for how the partial anchor index resets."""

    @pytest.mark.parametrize('prefix', [b's', b'serializeds', b'serializedProgram'])
    def test_mismatching_byte_is_not_a_new_start(self, prefix):
        """Test that the byte breaking a partial anchor is not reused as its first byte."""
        data = HEADER + prefix + b'serializedProgramAsset' + REFERENCE
        out, result = run(data)
        assert out == data
        assert result.anchors_found == 0
        assert result.replaced == 0

    def test_separated_prefix_still_matches(self):
        """Test that an anchor after an unrelated byte is found."""
        out, result = run(HEADER + b's serializedProgramAsset' + REFERENCE)
        assert out == HEADER + b's serializedProgramAsset: {fileID: 0}'
        assert result.replaced == 1


class TestVerbatim:
    """Tests for inputs that must pass through unchanged."""

    @pytest.mark.parametrize(
        'tail',
        [
            b': {fileID: 0}',
            b': {fileID: 11400000}',
            b': {fileID: 11400000, guid: xyz, type: 2}',
            b': {fileID: 11400000, guid: abc, type: }',
            b': {fileID: 11400000, guid: abc, type: 2',
            b': {fileID: -1, guid: abc, type: 2}',
            b'Extra: {fileID: 1, guid: abc, type: 2}',
            b': []',
            b'',
        ],
    )
    def test_non_matching_reference_is_untouched(self, tail):
        """Test that failed grammar attempts keep every original byte."""
        data = HEADER + b'  serializedProgramAsset' + tail + b'\n'
        out, result = run(data)
        assert out == data
        assert result.anchors_found == 1
        assert result.replaced == 0

    def test_without_yaml_header(self):
        """Test that non-YAML content is never scanned."""
        data = b'serializedProgramAsset' + REFERENCE
        out, result = run(data)
        assert out == data
        assert not result.is_yaml

    def test_binary_content(self):
        """Test that binary data passes through byte-identically."""
        data = bytes(range(256)) * 20
        out, result = run(data)
        assert out == data

    def test_partial_bom(self):
        """Test that a partial BOM stays in the output and the header check moves on."""
        out, result = run(b'\xef\xbb%YAML 1.1\nserializedProgramAsset' + REFERENCE)
        assert out == b'\xef\xbb%YAML 1.1\nserializedProgramAsset: {fileID: 0}'
        assert result.is_yaml

    def test_partial_bom_without_header(self):
        """Test that a partial BOM followed by other bytes passes through."""
        data = b'\xef\xbbserializedProgramAsset' + REFERENCE
        out, result = run(data)
        assert out == data
        assert not result.is_yaml

    def test_truncated_header(self):
        """Test a stream shorter than the header."""
        out, result = run(b'%YA')
        assert out == b'%YA'
        assert not result.is_yaml

    def test_empty_stream(self):
        out, result = run(b'')
        assert out == b''
        assert not result.is_yaml

    def test_without_anchor(self):
        """Test that YAML without the anchor is copied unchanged."""
        data = HEADER + b'--- !u!1 &1\nGameObject:\n  m_Name: Door\n' * 100
        out, result = run(data)
        assert out == data
        assert result.anchors_found == 0


class TestIdempotence:
    """Tests for applying the rewrite twice."""

    def test_second_pass_changes_nothing(self):
        """Test that rewritten output is a fixed point."""
        first, _ = run(HEADER + BEHAVIOUR * 2)
        second, result = run(first)
        assert second == first
        assert result.replaced == 0

    def test_failed_attempt_resumes_at_failing_byte(self):
        """Test that an anchor right after a failed attempt is still found."""
        data = HEADER + b'serializedProgramAsset: serializedProgramAsset' + REFERENCE
        out, result = run(data)
        assert out == HEADER + b'serializedProgramAsset: serializedProgramAsset: {fileID: 0}'
        assert result.anchors_found == 2
        assert result.replaced == 1
