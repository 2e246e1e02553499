import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

import yaml

DEFAULT_PUBLISH_RATE = 5.0
DEFAULT_MAX_LINEAR_SPEED = 1.0
DEFAULT_MAX_ANGULAR_SPEED = 1.0

MIN_PUBLISH_RATE = 1.0

NUMERIC_FIELDS = ('publish_rate', 'max_linear_speed', 'max_angular_speed')


@dataclass(frozen=True)
class EngineConfig:
    topic: Optional[str] = None
    message_schema: Optional[str] = None
    publish_rate: float = DEFAULT_PUBLISH_RATE
    max_linear_speed: float = DEFAULT_MAX_LINEAR_SPEED
    max_angular_speed: float = DEFAULT_MAX_ANGULAR_SPEED

    def __post_init__(self):
        # Out-of-range values are clamped to the nearest valid bound.
        object.__setattr__(self, 'publish_rate',
                           max(_as_float('publish_rate', self.publish_rate), MIN_PUBLISH_RATE))
        object.__setattr__(self, 'max_linear_speed',
                           max(_as_float('max_linear_speed', self.max_linear_speed), 0.0))
        object.__setattr__(self, 'max_angular_speed',
                           max(_as_float('max_angular_speed', self.max_angular_speed), 0.0))

    @property
    def period(self):
        """Seconds between two samples."""
        return 1.0 / self.publish_rate

    def updated(self, **changes):
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ValueError('Unknown setting(s): %s' % ', '.join(sorted(unknown)))
        return replace(self, **changes)

    def to_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data, base=None):
        """Build a config from a mapping, ignoring keys it does not know."""
        base = base if base is not None else cls()
        known = {f.name for f in fields(cls)}
        return base.updated(**{k: v for k, v in (data or {}).items() if k in known})


def _as_float(name, value):
    if isinstance(value, bool):
        raise ValueError('%s must be a number, got %r' % (name, value))
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError('%s must be a number, got %r' % (name, value))


class SettingsStore:
    """Write-through YAML persistence of the engine config."""

    def __init__(self, path, logger=None):
        self.path = os.path.expanduser(path)
        self.logger = logger or logging.getLogger(__name__)

    def load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path) as file:
                data = yaml.safe_load(file)
        except (OSError, yaml.YAMLError) as e:
            self.logger.warning('Could not read settings from %s: %s' % (self.path, e))
            return {}
        if not isinstance(data, dict):
            self.logger.warning('Ignoring settings in %s: not a mapping' % self.path)
            return {}
        return data

    def save(self, config):
        """Returns False when the settings could not be written."""
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w') as file:
                yaml.safe_dump(config.to_dict(), file, default_flow_style=False)
        except (OSError, yaml.YAMLError) as e:
            self.logger.warning('Could not save settings to %s: %s' % (self.path, e))
            return False
        return True
