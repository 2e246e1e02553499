import logging
import threading
from enum import Enum

from teleop_keys.command import Topic, UnknownSchemaError, make_command
from teleop_keys.config import EngineConfig


class SamplerState(Enum):
    STOPPED = 'stopped'
    RUNNING = 'running'


class ThreadTimer:
    """Calls ``callback`` every ``period`` seconds on a daemon thread."""

    def __init__(self, period, callback):
        self.period = period
        self.callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name='ThreadTimer', daemon=True)
        self._thread.start()

    def _run(self):
        while not self._cancelled.wait(self.period):
            self.callback()

    def cancel(self):
        # No join: the sampler cancels while holding the lock a running
        # callback is waiting on.
        self._cancelled.set()


class CommandSampler:
    """Samples the key state at a fixed rate and publishes velocity commands.

    ``publisher`` must provide ``advertise(topic_name, schema_name)``,
    ``unadvertise(topic_name)`` and ``publish(topic_name, message)``.
    ``timer_factory(period, callback)`` returns an object with ``cancel()``.
    Without a publisher the sampler only tracks keys and settings: nothing is
    advertised and the timer never runs.

    Ticks and topic changes are serialized by one lock, so once
    ``teardown()`` or ``clear_topic()`` returns no further message goes out.
    """

    def __init__(self, key_state, publisher, config=None, timer_factory=ThreadTimer,
                 logger=None, on_error=None):
        self.key_state = key_state
        self.publisher = publisher
        self.timer_factory = timer_factory
        self.logger = logger or logging.getLogger(__name__)
        self.on_error = on_error or self._log_error
        self._config = config if config is not None else EngineConfig()
        self._topic = None
        self._timer = None
        self._generation = 0
        self._started = False
        self._lock = threading.RLock()

    @property
    def config(self):
        return self._config

    @property
    def topic(self):
        return self._topic

    @property
    def state(self):
        return SamplerState.RUNNING if self._timer is not None else SamplerState.STOPPED

    def start(self):
        with self._lock:
            self._started = True
            if self._topic is not None:
                self._restart_timer()
                return
            config = self._config
            if config.topic and config.message_schema:
                self.select_topic(Topic(config.topic, config.message_schema))

    def select_topic(self, topic):
        with self._lock:
            if topic is None or not topic.name:
                self.clear_topic()
                return
            if self._topic is not None and self._topic.name == topic.name:
                if self._topic.schema_name == topic.schema_name:
                    return
            self._config = self._config.updated(topic=topic.name, message_schema=topic.schema_name)
            if self.publisher is None:
                return
            self._unadvertise()
            self.publisher.advertise(topic.name, topic.schema_name)
            self._topic = topic
            self.logger.info('Publishing %s on %s' % (topic.schema_name, topic.name))
            if self._started:
                self._restart_timer()

    def clear_topic(self):
        with self._lock:
            self._stop()
            self._config = self._config.updated(topic=None, message_schema=None)

    def update_config(self, **changes):
        """Apply setting changes, clamped, and return the new config.

        A topic without a schema is kept in the config but leaves the
        sampler stopped.
        """
        with self._lock:
            previous = self._config
            config = previous.updated(**changes)
            self._config = config

            if config.topic != previous.topic or config.message_schema != previous.message_schema:
                if config.topic and config.message_schema:
                    self.select_topic(Topic(config.topic, config.message_schema))
                else:
                    self._stop()
            elif config.publish_rate != previous.publish_rate and self._timer is not None:
                self._restart_timer()
            return self._config

    def sample(self):
        """Message for the current key snapshot, or None without an active topic."""
        topic = self._topic
        if topic is None:
            return None
        return make_command(self.key_state.snapshot(), self._config, topic.schema_name)

    def tick(self):
        with self._lock:
            topic = self._topic
            if topic is None:
                return None
            try:
                message = self.sample()
            except UnknownSchemaError as e:
                self.logger.error(str(e))
                return None
            self.publisher.publish(topic.name, message)
            return message

    def teardown(self):
        with self._lock:
            self._started = False
            self._stop()

    def _stop(self):
        self._cancel_timer()
        self._unadvertise()

    def _restart_timer(self):
        self._cancel_timer()
        generation = self._generation
        self._timer = self.timer_factory(self._config.period,
                                         lambda: self._on_timer(generation))

    def _cancel_timer(self):
        # Callbacks already queued by the old timer see a stale generation.
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation):
        with self._lock:
            if generation != self._generation:
                return
            try:
                self.tick()
            except Exception as e:
                self.on_error(e)

    def _unadvertise(self):
        if self._topic is not None:
            self.publisher.unadvertise(self._topic.name)
            self._topic = None

    def _log_error(self, error):
        self.logger.error('Failed to publish command: %s' % error)
