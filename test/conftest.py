import pytest

from teleop_keys.keys import KeyState


class FakePublisher:
    def __init__(self):
        self.calls = []
        self.published = []
        self.fail_with = None

    def advertise(self, topic_name, schema_name):
        self.calls.append(('advertise', topic_name, schema_name))

    def unadvertise(self, topic_name):
        self.calls.append(('unadvertise', topic_name))

    def publish(self, topic_name, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.published.append((topic_name, message))


class ManualTimer:
    def __init__(self, period, callback):
        self.period = period
        self.callback = callback
        self.cancelled = False

    def fire(self):
        self.callback()

    def cancel(self):
        self.cancelled = True


class ManualTimerFactory:
    def __init__(self):
        self.timers = []

    def __call__(self, period, callback):
        timer = ManualTimer(period, callback)
        self.timers.append(timer)
        return timer

    @property
    def current(self):
        return self.timers[-1]


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def timers():
    return ManualTimerFactory()


@pytest.fixture
def key_state():
    return KeyState()
