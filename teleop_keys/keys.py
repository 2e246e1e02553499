from enum import IntEnum


class DirectionSlot(IntEnum):
    NE = 0
    N = 1
    NW = 2
    W = 3
    CENTER = 4
    E = 5
    SE = 6
    S = 7
    SW = 8


KEY_ORDER = ('u', 'i', 'o', 'j', 'k', 'l', 'm', ',', '.')
DIRECTION_LABELS = ('🢄', '🢁', '🢅', '🢀', '○', '🢂', '🢇', '🢃', '🢆')

KEY_TO_SLOT = {key: DirectionSlot(i) for i, key in enumerate(KEY_ORDER)}

NUM_SLOTS = len(DirectionSlot)


class KeyState:
    """Which of the nine direction keys are currently held.

    The state is kept as an immutable tuple that is replaced on every event,
    so a reader on another thread always sees a complete snapshot.
    """

    def __init__(self):
        self._held = (False,) * NUM_SLOTS

    def on_key_down(self, raw_key):
        return self._set(raw_key, True)

    def on_key_up(self, raw_key):
        return self._set(raw_key, False)

    def _set(self, raw_key, pressed):
        slot = KEY_TO_SLOT.get(raw_key)
        if slot is None:
            return False
        held = self._held
        if held[slot] == pressed:
            return False
        self._held = held[:slot] + (pressed,) + held[slot + 1:]
        return True

    def snapshot(self):
        return self._held

    def held_slots(self):
        return [DirectionSlot(i) for i, pressed in enumerate(self._held) if pressed]

    def reset(self):
        self._held = (False,) * NUM_SLOTS


def format_key_grid(held):
    """Render the 3x3 key pad, marking held keys with brackets."""
    cells = []
    for i, pressed in enumerate(held):
        cell = '%s %s' % (DIRECTION_LABELS[i], KEY_ORDER[i])
        cells.append('[%s]' % cell if pressed else ' %s ' % cell)
    rows = [' '.join(cells[r:r + 3]) for r in range(0, NUM_SLOTS, 3)]
    return '\n'.join(rows)
