from __future__ import annotations

import pytest

from calidrone.errors import ValidationError
from calidrone.models import PlaybackHandle, RecordingArtifact, VideoFormat, VideoQuality
from calidrone.recording.export import export_all, export_artifact, export_filename


def _artifact(artifact_id: str, name: str, fmt: VideoFormat = VideoFormat.MP4) -> RecordingArtifact:
    return RecordingArtifact(
        id=artifact_id,
        name=name,
        binary_data=f'data-{artifact_id}'.encode(),
        playback_handle=PlaybackHandle(f'memory://test/{artifact_id}'),
        duration_seconds=1,
        format=fmt,
        quality=VideoQuality.LOW,
        created_at=0.0,
    )


def test_filename_is_sanitised():
    artifact = _artifact('r1', 'Recording 2024/05/17, 14:03:09', VideoFormat.WEBM)

    assert export_filename(artifact) == 'Recording 2024_05_17_ 14_03_09.webm'


def test_filename_falls_back_to_id():
    assert export_filename(_artifact('r1', '...')) == 'r1.mp4'


def test_export_artifact_writes_bytes(tmp_path):
    target = export_artifact(_artifact('r1', 'Flight'), str(tmp_path / 'out'))

    assert target == (tmp_path / 'out' / 'Flight.mp4').resolve()
    assert target.read_bytes() == b'data-r1'


def test_export_all_in_order(tmp_path):
    artifacts = [_artifact('r1', 'One'), _artifact('r2', 'Two', VideoFormat.AVI)]

    written = export_all(artifacts, str(tmp_path))

    assert [p.name for p in written] == ['One.mp4', 'Two.avi']


def test_export_outside_allowed_bases_is_rejected():
    with pytest.raises(ValidationError):
        export_artifact(_artifact('r1', 'Flight'), '/proc/calidrone-export')


def test_export_requires_directory():
    with pytest.raises(ValidationError):
        export_all([], '')


def test_export_all_keeps_recordings_with_the_same_name(tmp_path):
    first = _artifact('r1', 'Recording 2026-10-19 11:00:00')
    second = _artifact('r2', 'Recording 2026-10-19 11:00:00')

    written = export_all([first, second], str(tmp_path))

    assert [p.name for p in written] == [
        'Recording 2026-10-19 11_00_00.mp4',
        'Recording 2026-10-19 11_00_00-1.mp4',
    ]
    assert [p.read_bytes() for p in written] == [b'data-r1', b'data-r2']


def test_export_does_not_overwrite_existing_file(tmp_path):
    (tmp_path / 'Flight.mp4').write_bytes(b'keep')

    target = export_artifact(_artifact('r1', 'Flight'), str(tmp_path))

    assert target.name == 'Flight-1.mp4'
    assert (tmp_path / 'Flight.mp4').read_bytes() == b'keep'
