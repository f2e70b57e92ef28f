"""Canonical record written in place of a regenerated UdonSharp program asset."""

from unityfilter.scanners import ObjectReference


UDON_SHARP_PROGRAM_ASSET_TEMPLATE = (
    b'%%YAML 1.1\n'
    b'%%TAG !u! tag:unity3d.com,2011:\n'
    b'--- !u!114 &11400000\n'
    b'MonoBehaviour:\n'
    b'  m_ObjectHideFlags: 0\n'
    b'  m_CorrespondingSourceObject: {fileID: 0}\n'
    b'  m_PrefabInstance: {fileID: 0}\n'
    b'  m_PrefabAsset: {fileID: 0}\n'
    b'  m_GameObject: {fileID: 0}\n'
    b'  m_Enabled: 1\n'
    b'  m_EditorHideFlags: 0\n'
    b'  m_Script: {fileID: 11500000, guid: %(script_guid)s, type: 3}\n'
    b'  m_Name: %(name)s\n'
    b'  m_EditorClassIdentifier: \n'
    b'  serializedUdonProgramAsset: {fileID: 0}\n'
    b'  udonAssembly: \n'
    b'  assemblyError: \n'
    b'  sourceCsScript: %(source)s\n'
    b'  scriptVersion: 2\n'
    b'  compiledVersion: 2\n'
    b'  behaviourSyncMode: 0\n'
    b'  hasInteractEvent: 0\n'
    b'  scriptID: 0\n'
    b'  serializationData:\n'
    b'    SerializedFormat: 2\n'
    b'    SerializedBytes: \n'
    b'    ReferencedUnityObjects: []\n'
    b'    SerializedBytesString: \n'
    b'    Prefab: {fileID: 0}\n'
    b'    PrefabModificationsReferencedUnityObjects: []\n'
    b'    PrefabModifications: []\n'
    b'    SerializationNodes: []\n'
)


def format_reference(reference: ObjectReference) -> bytes:
    """Render a reference in Unity's inline form.

    A zero fileID is written as `{fileID: 0}` with no guid/type.
    """
    if reference.is_null or reference.guid is None:
        return b'{fileID: %s}' % reference.file_id.encode('ascii')
    return b'{fileID: %s, guid: %s, type: %s}' % (
        reference.file_id.encode('ascii'),
        reference.guid.encode('ascii'),
        reference.type.encode('ascii'),
    )


def render_program_asset_stub(name: bytes, source: ObjectReference, script_guid: str) -> bytes:
    """Render the canonical UdonSharp program asset for name and its source script."""
    return UDON_SHARP_PROGRAM_ASSET_TEMPLATE % {
        b'script_guid': script_guid.encode('ascii'),
        b'name': name,
        b'source': format_reference(source),
    }
