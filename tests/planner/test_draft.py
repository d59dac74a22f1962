from __future__ import annotations

import random

import pytest

from calidrone.errors import IntegrityError, ValidationError
from calidrone.models import Path, RenderVec3, Waypoint
from calidrone.planner import DEFAULT_PATH_NAME, DraftPath, DraftState, PathCatalog
from calidrone.planner import draft as transitions


def _draft_with(*points) -> DraftPath:
    draft = DraftPath()
    for point in points:
        draft.add_point(*point)
    return draft


def test_add_and_undo_track_net_additions():
    rng = random.Random(7)
    draft = DraftPath()
    expected = 0
    for _ in range(200):
        if rng.random() < 0.6:
            draft.add_point(rng.uniform(-5, 5), rng.uniform(-5, 5), rng.uniform(0, 5))
            expected += 1
        else:
            draft.undo()
            expected = max(0, expected - 1)
        assert len(draft.points) == expected


def test_undo_on_empty_draft_is_a_no_op():
    state = DraftState(name='keep me')

    assert transitions.undo(state) is state


def test_undo_clears_selection():
    draft = _draft_with((1, 0, 1), (2, 0, 1))
    draft.select(0)

    draft.undo()

    assert draft.points == (Waypoint(1, 0, 1),)
    assert draft.selected_index is None
    assert draft.manual_input == {'x': '', 'y': '', 'z': ''}


def test_add_point_does_not_touch_selection():
    draft = _draft_with((1, 0, 1))
    draft.select(0)

    draft.add_point(3, 3, 3)

    assert draft.selected_index == 0


def test_add_point_from_pick_snaps_and_converts():
    draft = DraftPath()

    draft.add_point_from_pick(RenderVec3(1.2, 0.0, 3.9))

    assert draft.points == (Waypoint(4.0, 1.0, 1.0),)


def test_select_toggles_and_mirrors_coordinates():
    draft = _draft_with((1, 0, 1), (2.5, -1, 3))

    draft.select(1)
    assert draft.selected_index == 1
    assert draft.manual_input == {'x': '2.5', 'y': '-1', 'z': '3'}

    draft.select(1)
    assert draft.selected_index is None
    assert draft.manual_input == {'x': '', 'y': '', 'z': ''}


def test_select_another_index_moves_selection():
    draft = _draft_with((1, 0, 1), (2, 0, 1))
    draft.select(0)

    draft.select(1)

    assert draft.selected_index == 1
    assert draft.manual_input['x'] == '2'


def test_select_out_of_range_leaves_state_unchanged():
    draft = _draft_with((1, 0, 1))
    before = draft.state

    with pytest.raises(ValidationError):
        draft.select(3)

    assert draft.state is before


def test_update_selected_replaces_in_place_and_clears_selection():
    draft = _draft_with((1, 0, 1), (2, 0, 1))
    draft.select(0)

    draft.update_selected(5, 5, 5)

    assert draft.points == (Waypoint(5, 5, 5), Waypoint(2, 0, 1))
    assert draft.selected_index is None


def test_update_selected_requires_selection():
    draft = _draft_with((1, 0, 1))

    with pytest.raises(ValidationError):
        draft.update_selected(5, 5, 5)

    assert draft.points == (Waypoint(1, 0, 1),)


def test_delete_selected_shifts_later_points():
    draft = _draft_with((1, 0, 1), (2, 0, 1), (3, 0, 1))
    draft.select(1)

    draft.delete_selected()

    assert draft.points == (Waypoint(1, 0, 1), Waypoint(3, 0, 1))
    assert draft.selected_index is None


def test_delete_selected_without_selection_is_rejected():
    draft = _draft_with((1, 0, 1), (2, 0, 1))

    with pytest.raises(ValidationError):
        draft.delete_selected()

    assert len(draft.points) == 2


def test_clear_resets_everything():
    draft = _draft_with((1, 0, 1))
    draft.rename('Survey')
    draft.select(0)

    draft.clear()

    assert draft.state == DraftState()


def test_manual_point_entry_defaults_blank_fields_to_zero():
    draft = DraftPath()
    draft.set_manual_input(x='3', z='abc')

    draft.add_manual_point()

    assert draft.points == (Waypoint(3.0, 0.0, 0.0),)
    assert draft.manual_input == {'x': '', 'y': '', 'z': ''}


def test_update_selected_from_input():
    draft = _draft_with((1, 0, 1), (2, 0, 1))
    draft.select(1)
    draft.set_manual_input(y='4')

    draft.update_selected_from_input()

    assert draft.points[1] == Waypoint(2, 4, 1)
    assert draft.selected_index is None


def test_update_selected_from_input_requires_all_fields():
    draft = _draft_with((1, 0, 1))
    draft.select(0)
    draft.set_manual_input(z='  ')

    with pytest.raises(ValidationError) as exc_info:
        draft.update_selected_from_input()

    assert exc_info.value.details == {'missing': ['z']}
    assert draft.selected_index == 0


def test_save_moves_draft_into_catalog_and_resets():
    catalog = PathCatalog()
    draft = _draft_with((1, 0, 1), (2, 0, 1))
    draft.rename('  Orbit  ')

    path = draft.save(catalog, 'p-1', 100.0)

    assert catalog.list() == (path,)
    assert path.name == 'Orbit'
    assert path.points == (Waypoint(1, 0, 1), Waypoint(2, 0, 1))
    assert path.created_at == 100.0
    assert draft.points == ()
    assert draft.name == ''
    assert draft.selected_index is None


def test_save_uses_default_name():
    catalog = PathCatalog()
    draft = _draft_with((0, 0, 1))

    assert draft.save(catalog, 'p-1', 0.0).name == DEFAULT_PATH_NAME


def test_save_empty_draft_leaves_catalog_untouched():
    catalog = PathCatalog()
    draft = DraftPath()
    draft.rename('Nothing')

    with pytest.raises(ValidationError):
        draft.save(catalog, 'p-1', 0.0)

    assert len(catalog) == 0
    assert draft.name == 'Nothing'


def test_save_keeps_draft_when_catalog_rejects_id():
    catalog = PathCatalog()
    _draft_with((1, 1, 1)).save(catalog, 'p-1', 0.0)
    draft = _draft_with((2, 2, 2))

    with pytest.raises(IntegrityError):
        draft.save(catalog, 'p-1', 1.0)

    assert draft.points == (Waypoint(2, 2, 2),)
    assert len(catalog) == 1


def test_load_from_path_copies_points_and_clears_editing_state():
    path = Path(id='p-1', name='Saved', points=(Waypoint(1, 2, 3),), created_at=0.0)
    draft = _draft_with((9, 9, 9))
    draft.rename('Other')
    draft.select(0)

    draft.load_from_path(path)

    assert draft.points == path.points
    assert draft.name == ''
    assert draft.selected_index is None

    draft.add_point(4, 4, 4)
    assert path.points == (Waypoint(1, 2, 3),)


def test_load_points_normalizes_missing_coordinates():
    draft = DraftPath()

    draft.load_points([{'x': 1}, {'y': 2, 'z': None}, (3,)])

    assert draft.points == (Waypoint(1, 0, 0), Waypoint(0, 2, 0), Waypoint(3, 0, 0))


def test_path_line_needs_two_points():
    draft = _draft_with((1, 0, 1))
    assert draft.path_line() == ()

    draft.add_point(2, 0, 1)

    assert draft.path_line() == (RenderVec3(0, 1, 1), RenderVec3(0, 1, 2))
    assert draft.render_points() == draft.path_line()


def test_draft_state_rejects_invalid_selection():
    with pytest.raises(ValidationError):
        DraftState(points=(Waypoint(),), selected_index=1)
