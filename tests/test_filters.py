"""Tests for the clean and smudge pipelines."""

import gzip
import io
from pathlib import Path

from unityfilter.filters import clean, smudge
from unityfilter.models import FilterSettings
from unityfilter.record import UDON_SHARP_PROGRAM_ASSET_GUID


SCENE = (
    b'%YAML 1.1\n%TAG !u! tag:unity3d.com,2011:\n'
    b'--- !u!114 &1234\n'
    b'MonoBehaviour:\n'
    b'  serializedProgramAsset: {fileID: 11400000, guid: 9eb6bf22b7b45af1d8ef5e8652d24b03, type: 2}\n'
)
CLEAN_SCENE = SCENE.replace(
    b'{fileID: 11400000, guid: 9eb6bf22b7b45af1d8ef5e8652d24b03, type: 2}', b'{fileID: 0}'
)


def read_log(seven_zip: str) -> list[str]:
    log_path = Path(seven_zip).parent / 'fake7z.log'
    if not log_path.exists():
        return []
    return log_path.read_text().splitlines()


class TestClean:
    """Tests for the clean filter."""

    def test_scene_is_rewritten_and_compressed(self, fake_seven_zip):
        output = io.BytesIO()
        clean('Assets/World.unity', io.BytesIO(SCENE), output, FilterSettings(seven_zip=fake_seven_zip))
        assert gzip.decompress(output.getvalue()) == CLEAN_SCENE
        assert read_log(fake_seven_zip) == ['a -si -so -an -tgzip']

    def test_prefab_is_rewritten_without_compression(self, fake_seven_zip):
        output = io.BytesIO()
        clean('Assets/Door.prefab', io.BytesIO(SCENE), output, FilterSettings(seven_zip=fake_seven_zip))
        assert output.getvalue() == CLEAN_SCENE
        assert read_log(fake_seven_zip) == []

    def test_below_threshold_is_not_compressed(self, fake_seven_zip):
        settings = FilterSettings(seven_zip=fake_seven_zip, compress_threshold=len(SCENE) + 1)
        output = io.BytesIO()
        clean('Assets/World.unity', io.BytesIO(SCENE), output, settings)
        assert output.getvalue() == CLEAN_SCENE
        assert read_log(fake_seven_zip) == []

    def test_at_threshold_is_compressed(self, fake_seven_zip):
        settings = FilterSettings(seven_zip=fake_seven_zip, compress_threshold=len(SCENE))
        output = io.BytesIO()
        clean('Assets/World.unity', io.BytesIO(SCENE), output, settings)
        assert gzip.decompress(output.getvalue()) == CLEAN_SCENE

    def test_already_compressed_input(self, fake_seven_zip):
        """Test that gzip input is not compressed a second time."""
        data = gzip.compress(SCENE)
        output = io.BytesIO()
        clean('Assets/World.unity', io.BytesIO(data), output, FilterSettings(seven_zip=fake_seven_zip))
        assert output.getvalue() == data
        assert read_log(fake_seven_zip) == []

    def test_disable_transforms(self, fake_seven_zip):
        settings = FilterSettings(seven_zip=fake_seven_zip, disable_transforms=True, compress_extensions=[])
        output = io.BytesIO()
        clean('Assets/World.unity', io.BytesIO(SCENE), output, settings)
        assert output.getvalue() == SCENE

    def test_program_asset_is_regenerated(self):
        data = (
            b'%YAML 1.1\n--- !u!114 &11400000\nMonoBehaviour:\n'
            b'  m_Script: {fileID: 11500000, guid: ' + UDON_SHARP_PROGRAM_ASSET_GUID.encode() + b', type: 3}\n'
            b'  m_Name: MyScript\n'
            b'  udonAssembly: .data_start\n'
            b'  sourceCsScript: {fileID: 0}\n'
        )
        output = io.BytesIO()
        clean('Assets/MyScript.asset', io.BytesIO(data), output, FilterSettings())
        assert b'  m_Name: MyScript\n' in output.getvalue()
        assert b'.data_start' not in output.getvalue()

    def test_other_files_pass_through(self):
        output = io.BytesIO()
        clean('Assets/Door.cs', io.BytesIO(SCENE), output, FilterSettings())
        assert output.getvalue() == SCENE

    def test_settings_from_environment(self, monkeypatch, fake_seven_zip):
        monkeypatch.setenv('UNITYFILTER_SEVEN_ZIP', fake_seven_zip)
        monkeypatch.setenv('UNITYFILTER_COMPRESS_EXTENSIONS', '.prefab')
        output = io.BytesIO()
        clean('Assets/Door.prefab', io.BytesIO(SCENE), output)
        assert gzip.decompress(output.getvalue()) == CLEAN_SCENE


class TestSmudge:
    """Tests for the smudge filter."""

    def test_gzip_scene_is_decompressed(self, fake_seven_zip):
        """Test that gzip content goes to the decompressor and nothing else."""
        output = io.BytesIO()
        smudge('Assets/World.unity', io.BytesIO(gzip.compress(CLEAN_SCENE)), output, FilterSettings(seven_zip=fake_seven_zip))
        assert output.getvalue() == CLEAN_SCENE
        assert read_log(fake_seven_zip) == ['x -si -so -an -tgzip']

    def test_plain_scene_passes_through(self, fake_seven_zip):
        """Test that a scene stored before compression was enabled checks out unchanged."""
        output = io.BytesIO()
        smudge('Assets/World.unity', io.BytesIO(SCENE), output, FilterSettings(seven_zip=fake_seven_zip))
        assert output.getvalue() == SCENE
        assert read_log(fake_seven_zip) == []

    def test_gzip_of_uncompressed_extension_passes_through(self, fake_seven_zip):
        data = gzip.compress(SCENE)
        output = io.BytesIO()
        smudge('Assets/Data.bytes', io.BytesIO(data), output, FilterSettings(seven_zip=fake_seven_zip))
        assert output.getvalue() == data

    def test_clean_smudge_round_trip(self, fake_seven_zip):
        settings = FilterSettings(seven_zip=fake_seven_zip)
        stored = io.BytesIO()
        clean('Assets/World.unity', io.BytesIO(SCENE), stored, settings)
        restored = io.BytesIO()
        smudge('Assets/World.unity', io.BytesIO(stored.getvalue()), restored, settings)
        assert restored.getvalue() == CLEAN_SCENE
