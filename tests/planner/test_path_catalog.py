from __future__ import annotations

import pytest

from calidrone.errors import IntegrityError, NotFoundError
from calidrone.models import Path, Waypoint
from calidrone.planner import PathCatalog


def _path(path_id: str, name: str = 'Path') -> Path:
    return Path(id=path_id, name=name, points=(Waypoint(1, 0, 1),), created_at=0.0)


def test_list_preserves_insertion_order():
    catalog = PathCatalog()
    for path_id in ('c', 'a', 'b'):
        catalog.add(_path(path_id))

    assert [p.id for p in catalog.list()] == ['c', 'a', 'b']
    assert [p.id for p in catalog] == ['c', 'a', 'b']


def test_duplicate_id_is_rejected():
    catalog = PathCatalog()
    original = _path('a', 'First')
    catalog.add(original)

    with pytest.raises(IntegrityError):
        catalog.add(_path('a', 'Second'))

    assert catalog.get('a') is original
    assert len(catalog) == 1


def test_remove_absent_id_is_a_no_op():
    catalog = PathCatalog()
    catalog.add(_path('a'))

    assert catalog.remove('missing') is False
    assert catalog.remove('a') is True
    assert catalog.remove('a') is False
    assert 'a' not in catalog


def test_get_unknown_id():
    with pytest.raises(NotFoundError):
        PathCatalog().get('nope')


def test_list_is_a_snapshot():
    catalog = PathCatalog()
    catalog.add(_path('a'))
    listing = catalog.list()

    catalog.add(_path('b'))

    assert len(listing) == 1
    assert isinstance(listing, tuple)
