from teleop_keys.keys import DirectionSlot, KEY_ORDER, KeyState, format_key_grid


def test_initially_released():
    assert KeyState().snapshot() == (False,) * 9


def test_key_layout_follows_slot_order():
    state = KeyState()
    for key, slot in zip(KEY_ORDER, DirectionSlot):
        state.reset()
        state.on_key_down(key)
        assert state.held_slots() == [slot]


def test_press_and_release():
    state = KeyState()
    assert state.on_key_down('i')
    assert state.snapshot()[DirectionSlot.N]
    assert state.on_key_up('i')
    assert state.snapshot() == (False,) * 9


def test_key_repeat_is_idempotent():
    state = KeyState()
    state.on_key_down(',')
    assert not state.on_key_down(',')
    assert state.held_slots() == [DirectionSlot.S]


def test_unmapped_keys_are_ignored():
    state = KeyState()
    assert not state.on_key_down('w')
    assert not state.on_key_up('x')
    assert not state.on_key_down(None)
    assert state.snapshot() == (False,) * 9


def test_snapshot_is_not_affected_by_later_events():
    state = KeyState()
    state.on_key_down('u')
    before = state.snapshot()
    state.on_key_down('l')
    assert before == (True,) + (False,) * 8
    assert state.held_slots() == [DirectionSlot.NE, DirectionSlot.E]


def test_format_key_grid_marks_held_keys():
    state = KeyState()
    state.on_key_down('k')
    rows = format_key_grid(state.snapshot()).split('\n')
    assert len(rows) == 3
    assert '[○ k]' in rows[1]
    assert '[' not in rows[0]
    assert rows[2].split() == ['🢇', 'm', '🢃', ',', '🢆', '.']
