from __future__ import annotations

import pytest

from mini_postman_focus import (
    BODY_FIELD_ID,
    METHOD_FIELD_ID,
    METHODS,
    SUBMIT_FIELD_ID,
    URL_FIELD_ID,
    VALUE_SLOT,
    Action,
    BodyCursor,
    FocusEngine,
    clamp_focus,
    field_count,
    focus_projection,
    header_field_id,
    header_slot,
    is_valid_field_id,
    transition,
)

ALL_KEYS = [
    "enter", "up", "down", "left", "right", "tab", "ctrl+up", "ctrl+down",
    "shift+tab", "escape", "ctrl+s", "ctrl+n", "ctrl+r", "q", "a", "backspace",
]


def all_ids(header_count: int) -> list[int]:
    return list(range(field_count(header_count))) + [SUBMIT_FIELD_ID]


@pytest.mark.parametrize("n", range(6))
def test_field_count_grows_by_two_per_header(n: int) -> None:
    assert field_count(n) == 3 + 2 * n


def test_header_ids_are_contiguous_pairs() -> None:
    assert header_field_id(0) == 3
    assert header_field_id(0, VALUE_SLOT) == 4
    assert header_field_id(2) == 7
    assert header_slot(6, 2) == (1, 1)
    assert header_slot(7, 2) is None
    assert header_slot(SUBMIT_FIELD_ID, 100) is None


@pytest.mark.parametrize("n", range(5))
def test_every_field_reachable_by_down(n: int) -> None:
    current, seen = METHOD_FIELD_ID, {METHOD_FIELD_ID}
    for _ in range(field_count(n) + 2):
        current = transition(current, n, "down").focus
        seen.add(current)
    assert seen == set(all_ids(n))


def test_up_from_submit_without_headers_lands_on_body() -> None:
    assert transition(SUBMIT_FIELD_ID, 0, "up").focus == BODY_FIELD_ID


def test_up_from_submit_lands_on_last_header_name() -> None:
    t = transition(SUBMIT_FIELD_ID, 3, "up")
    assert t.action is Action.FOCUS
    assert t.focus == header_field_id(2)


def test_down_from_body_last_line_without_headers_lands_on_submit() -> None:
    assert transition(BODY_FIELD_ID, 0, "down", BodyCursor(2, 3)).focus == SUBMIT_FIELD_ID


def test_down_from_body_last_line_lands_on_first_header() -> None:
    assert transition(BODY_FIELD_ID, 2, "down", BodyCursor(0, 1)).focus == header_field_id(0)


def test_down_inside_body_is_delegated() -> None:
    t = transition(BODY_FIELD_ID, 2, "down", BodyCursor(0, 3))
    assert t.action is Action.DELEGATE
    assert t.focus == BODY_FIELD_ID


def test_up_inside_body_is_delegated_until_first_line() -> None:
    assert transition(BODY_FIELD_ID, 0, "up", BodyCursor(1, 3)).action is Action.DELEGATE
    assert transition(BODY_FIELD_ID, 0, "up", BodyCursor(0, 3)).focus == URL_FIELD_ID


def test_ctrl_arrows_leave_body_regardless_of_cursor() -> None:
    assert transition(BODY_FIELD_ID, 0, "ctrl+up", BodyCursor(3, 5)).focus == URL_FIELD_ID
    assert transition(BODY_FIELD_ID, 0, "ctrl+down", BodyCursor(0, 5)).focus == SUBMIT_FIELD_ID
    assert transition(BODY_FIELD_ID, 2, "ctrl+down", BodyCursor(0, 5)).focus == header_field_id(0)


def test_ctrl_arrows_ignored_outside_body() -> None:
    assert transition(URL_FIELD_ID, 0, "ctrl+up").action is Action.NOOP
    assert transition(header_field_id(0), 1, "ctrl+down").action is Action.NOOP


def test_method_selection_is_clamped() -> None:
    index = 0
    for _ in range(10):
        index = transition(METHOD_FIELD_ID, 0, "right", selected_index=index).selected_index
    assert index == len(METHODS) - 1
    for _ in range(10):
        t = transition(METHOD_FIELD_ID, 0, "left", selected_index=index)
        index = t.selected_index
        assert t.action is Action.SELECT
        assert t.focus == METHOD_FIELD_ID
    assert index == 0


def test_enter_walks_fixed_fields_and_submits() -> None:
    assert transition(METHOD_FIELD_ID, 0, "enter").focus == URL_FIELD_ID
    assert transition(URL_FIELD_ID, 0, "enter").focus == BODY_FIELD_ID
    assert transition(BODY_FIELD_ID, 0, "enter").action is Action.DELEGATE
    assert transition(SUBMIT_FIELD_ID, 0, "enter").action is Action.SUBMIT


def test_enter_on_last_header_field_jumps_to_submit() -> None:
    assert transition(header_field_id(0), 1, "enter").focus == header_field_id(0, VALUE_SLOT)
    assert transition(header_field_id(0, VALUE_SLOT), 1, "enter").focus == SUBMIT_FIELD_ID


def test_up_between_header_rows_keeps_column() -> None:
    assert transition(header_field_id(1), 2, "up").focus == header_field_id(0)
    assert transition(header_field_id(1, VALUE_SLOT), 2, "up").focus == header_field_id(0, VALUE_SLOT)
    assert transition(header_field_id(0, VALUE_SLOT), 2, "up").focus == BODY_FIELD_ID
    assert transition(header_field_id(0), 2, "up").focus == BODY_FIELD_ID


def test_left_on_headers_never_reaches_body() -> None:
    assert transition(header_field_id(0, VALUE_SLOT), 1, "left").focus == header_field_id(0)
    assert transition(header_field_id(0), 1, "left").focus == header_field_id(0)


def test_right_on_header_advances() -> None:
    assert transition(header_field_id(0), 2, "right").focus == header_field_id(0, VALUE_SLOT)
    assert transition(header_field_id(1, VALUE_SLOT), 2, "right").focus == SUBMIT_FIELD_ID


def test_submit_is_terminal_for_down_left_right() -> None:
    for key in ("down", "left", "right"):
        assert transition(SUBMIT_FIELD_ID, 2, key).action is Action.NOOP


def test_tab_indents_body_without_moving() -> None:
    t = transition(BODY_FIELD_ID, 1, "tab")
    assert t.action is Action.INDENT
    assert t.focus == BODY_FIELD_ID
    assert transition(URL_FIELD_ID, 1, "tab").action is Action.NOOP


def test_shift_tab_is_never_left_to_the_toolkit() -> None:
    for current in all_ids(2):
        t = transition(current, 2, "shift+tab")
        assert t.action is Action.NOOP
        assert t.focus == current


def test_escape_and_submit_shortcut_work_everywhere() -> None:
    for current in all_ids(2):
        assert transition(current, 2, "escape").action is Action.QUIT
        assert transition(current, 2, "ctrl+s").action is Action.SUBMIT


def test_q_quits_only_outside_text_fields() -> None:
    assert transition(METHOD_FIELD_ID, 1, "q").action is Action.QUIT
    assert transition(SUBMIT_FIELD_ID, 1, "q").action is Action.QUIT
    assert transition(URL_FIELD_ID, 1, "q").action is Action.DELEGATE
    assert transition(header_field_id(0), 1, "q").action is Action.DELEGATE


def test_plain_keys_delegate_to_text_fields_only() -> None:
    assert transition(URL_FIELD_ID, 0, "a").action is Action.DELEGATE
    assert transition(BODY_FIELD_ID, 0, "backspace").action is Action.DELEGATE
    assert transition(METHOD_FIELD_ID, 0, "a").action is Action.NOOP
    assert transition(SUBMIT_FIELD_ID, 0, "a").action is Action.NOOP


def test_remove_header_is_noop_without_headers() -> None:
    assert transition(URL_FIELD_ID, 0, "ctrl+r").action is Action.NOOP
    assert transition(URL_FIELD_ID, 1, "ctrl+r").action is Action.REMOVE_HEADER
    assert transition(SUBMIT_FIELD_ID, 0, "ctrl+n").action is Action.ADD_HEADER


@pytest.mark.parametrize("n", range(4))
def test_transitions_never_produce_invalid_ids(n: int) -> None:
    cursors = [BodyCursor(0, 1), BodyCursor(0, 3), BodyCursor(2, 3)]
    for current in all_ids(n):
        for key in ALL_KEYS:
            for body in cursors:
                assert is_valid_field_id(transition(current, n, key, body).focus, n)


def test_projection_focuses_exactly_one_field() -> None:
    first = list(focus_projection(header_field_id(1, VALUE_SLOT), 3))
    assert len(first) == field_count(3) + 1
    assert [fid for fid, focused in first if focused] == [header_field_id(1, VALUE_SLOT)]
    assert list(focus_projection(header_field_id(1, VALUE_SLOT), 3)) == first
    assert first[-1] == (SUBMIT_FIELD_ID, False)


@pytest.mark.parametrize("n", [126, 127, 128, 500])
def test_submit_id_never_collides_with_a_header(n: int) -> None:
    assert header_slot(SUBMIT_FIELD_ID, n) is None
    assert SUBMIT_FIELD_ID not in range(field_count(n))
    last = header_field_id(n - 1, VALUE_SLOT)
    for current in (SUBMIT_FIELD_ID, last):
        projection = list(focus_projection(current, n))
        assert [fid for fid, focused in projection if focused] == [current]
    assert transition(last, n, "down").focus == SUBMIT_FIELD_ID
    assert transition(SUBMIT_FIELD_ID, n, "up").focus == header_field_id(n - 1)


def test_clamp_moves_stale_header_focus_to_submit() -> None:
    assert clamp_focus(header_field_id(2), 1) == SUBMIT_FIELD_ID
    assert clamp_focus(header_field_id(0), 1) == header_field_id(0)
    assert clamp_focus(URL_FIELD_ID, 0) == URL_FIELD_ID


def test_engine_tracks_focus_and_method() -> None:
    engine = FocusEngine()
    engine.handle_key("right", 0)
    engine.handle_key("right", 0)
    assert engine.method == "PUT"
    engine.handle_key("down", 0)
    assert engine.current == URL_FIELD_ID
    assert engine.handle_key("x", 0).action is Action.DELEGATE
    assert engine.current == URL_FIELD_ID


def test_engine_clamps_after_removing_all_headers() -> None:
    engine = FocusEngine()
    engine.focus_field(header_field_id(1, VALUE_SLOT), 2)
    assert engine.removal_index(2) == 1
    assert engine.clamp(0) == SUBMIT_FIELD_ID
    assert engine.removal_index(0) is None


def test_engine_removes_last_pair_when_focus_is_elsewhere() -> None:
    engine = FocusEngine()
    engine.focus_field(BODY_FIELD_ID, 3)
    assert engine.removal_index(3) == 2


def test_engine_focuses_new_header_name() -> None:
    engine = FocusEngine()
    assert engine.header_added(2) == header_field_id(1)


def test_engine_rejects_unknown_field() -> None:
    engine = FocusEngine()
    with pytest.raises(ValueError):
        engine.focus_field(header_field_id(0), 0)
    assert engine.current == METHOD_FIELD_ID


def test_engine_projection_is_idempotent() -> None:
    engine = FocusEngine()
    engine.focus_field(SUBMIT_FIELD_ID, 1)
    assert engine.projection(1) == engine.projection(1)
    assert sum(focused for _, focused in engine.projection(1)) == 1
