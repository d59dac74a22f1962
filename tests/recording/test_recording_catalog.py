from __future__ import annotations

import pytest

from calidrone.errors import IntegrityError, NotFoundError
from calidrone.models import PlaybackHandle, RecordingArtifact, VideoFormat, VideoQuality
from calidrone.recording import RecordingCatalog


class CountingHandle(PlaybackHandle):
    def __init__(self, uri: str) -> None:
        self.release_calls = []
        super().__init__(uri, on_release=self.release_calls.append)


def _artifact(artifact_id: str, data: bytes = b'12345', duration: int = 3) -> RecordingArtifact:
    return RecordingArtifact(
        id=artifact_id,
        name=f'Recording {artifact_id}',
        binary_data=data,
        playback_handle=CountingHandle(f'memory://test/{artifact_id}'),
        duration_seconds=duration,
        format=VideoFormat.MP4,
        quality=VideoQuality.HIGH,
        created_at=0.0,
    )


def test_remove_releases_handle_once():
    catalog = RecordingCatalog()
    artifact = _artifact('r1')
    catalog.add(artifact)

    assert catalog.remove('r1') is True
    assert catalog.remove('r1') is False

    assert len(artifact.playback_handle.release_calls) == 1
    assert artifact.playback_handle.released is True


def test_release_through_two_paths_happens_once():
    catalog = RecordingCatalog()
    artifact = _artifact('r1')
    catalog.add(artifact)
    artifact.playback_handle.release()

    catalog.remove('r1')
    catalog.clear()

    assert len(artifact.playback_handle.release_calls) == 1


def test_remove_absent_is_a_no_op():
    assert RecordingCatalog().remove('nope') is False


def test_aggregate_folds_all_entries():
    catalog = RecordingCatalog()
    assert catalog.aggregate() == {'count': 0, 'total_duration_seconds': 0, 'total_size_bytes': 0}

    catalog.add(_artifact('r1', b'abc', 4))
    catalog.add(_artifact('r2', b'defgh', 6))

    assert catalog.aggregate() == {'count': 2, 'total_duration_seconds': 10, 'total_size_bytes': 8}


def test_clear_releases_every_handle():
    catalog = RecordingCatalog()
    artifacts = [_artifact('r1'), _artifact('r2')]
    for artifact in artifacts:
        catalog.add(artifact)

    assert catalog.clear() == 2
    assert len(catalog) == 0
    assert all(a.playback_handle.released for a in artifacts)


def test_lookup_and_order():
    catalog = RecordingCatalog()
    catalog.add(_artifact('b'))
    catalog.add(_artifact('a'))

    assert [a.id for a in catalog.list()] == ['b', 'a']
    assert catalog.get('a').id == 'a'
    with pytest.raises(NotFoundError):
        catalog.get('zzz')
    with pytest.raises(IntegrityError):
        catalog.add(_artifact('a'))


def test_open_player_keeps_uri_until_release():
    handle = PlaybackHandle('memory://test/x')

    assert handle.open_player() == 'memory://test/x'
    assert handle.in_use is True
    handle.close_player()
    assert handle.in_use is False

    assert handle.release() is True
    assert handle.release() is False
    with pytest.raises(RuntimeError):
        handle.open_player()


def test_open_player_survives_remove_until_closed():
    catalog = RecordingCatalog()
    artifact = _artifact('r1')
    catalog.add(artifact)
    handle = artifact.playback_handle
    handle.open_player()

    assert catalog.remove('r1') is True

    assert 'r1' not in catalog
    assert handle.released is False
    assert handle.release_pending is True
    assert handle.release_calls == []
    with pytest.raises(RuntimeError):
        handle.open_player()

    assert handle.close_player() is True

    assert handle.released is True
    assert handle.release_calls == [handle]
    assert handle.release() is False


def test_clear_defers_release_until_last_player_closes():
    catalog = RecordingCatalog()
    artifact = _artifact('r1')
    catalog.add(artifact)
    handle = artifact.playback_handle
    handle.open_player()
    handle.open_player()

    assert catalog.clear() == 1
    assert catalog.clear() == 0

    assert handle.close_player() is False
    assert handle.released is False
    assert handle.close_player() is True
    assert len(handle.release_calls) == 1
    assert handle.close_player() is False
