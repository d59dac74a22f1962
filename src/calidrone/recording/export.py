"""Writing recordings to disk for download."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..errors import ValidationError
from ..models import RecordingArtifact

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^\w\-. ]+')


def _allowed_bases(extra: Optional[Iterable[str]] = None) -> List[Path]:
    bases = [
        Path(tempfile.gettempdir()).resolve(),
        Path(os.path.expanduser('~/Downloads')).resolve(),
        Path(os.path.expanduser('~/Desktop')).resolve(),
        Path.cwd().resolve(),
    ]
    for base in extra or ():
        bases.append(Path(base).resolve())
    return bases


def validate_export_directory(directory: str, extra_bases: Optional[Sequence[str]] = None) -> Path:
    """Resolve ``directory`` and make sure it sits under an allowed base."""
    if not directory or not isinstance(directory, str):
        raise ValidationError('directory is required', details={'parameter': 'directory'})

    try:
        path = Path(directory.replace('\x00', '')).resolve()
    except (OSError, ValueError) as exc:
        logger.warning('Export path validation error for %s: %s', directory, exc)
        raise ValidationError('directory is not a valid path', details={'directory': directory}) from exc

    for base in _allowed_bases(extra_bases):
        try:
            path.relative_to(base)
            return path
        except ValueError:
            continue

    logger.warning('Export path validation failed for %s', path)
    raise ValidationError(
        'directory is not within an allowed location',
        details={'directory': str(path)},
    )


def export_filename(artifact: RecordingArtifact) -> str:
    """``<name>.<format>`` with characters unsafe for file names replaced."""
    stem = _UNSAFE_CHARS.sub('_', artifact.name).strip(' .') or artifact.id
    return f"{stem}.{artifact.format.value}"


def _unique_target(directory: Path, filename: str) -> Path:
    """``filename`` in ``directory``, suffixed -1, -2, ... if already taken."""
    target = directory / filename
    stem, suffix = target.stem, target.suffix
    counter = 1
    while target.exists():
        target = directory / f"{stem}-{counter}{suffix}"
        counter += 1
    return target


def export_artifact(
    artifact: RecordingArtifact,
    directory: str,
    *,
    extra_bases: Optional[Sequence[str]] = None,
) -> Path:
    """Write the recording into ``directory`` without overwriting existing files."""
    target_dir = validate_export_directory(directory, extra_bases)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = _unique_target(target_dir, export_filename(artifact))
    target.write_bytes(artifact.binary_data)
    logger.info('Exported recording %s to %s', artifact.id, target)
    return target


def export_all(
    artifacts: Iterable[RecordingArtifact],
    directory: str,
    *,
    extra_bases: Optional[Sequence[str]] = None,
) -> List[Path]:
    """Export every recording in order; the directory is checked once up front."""
    validate_export_directory(directory, extra_bases)
    return [export_artifact(a, directory, extra_bases=extra_bases) for a in artifacts]


__all__ = ["validate_export_directory", "export_filename", "export_artifact", "export_all"]
