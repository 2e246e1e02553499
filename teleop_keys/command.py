from collections import namedtuple

import numpy as np

# Indexed by DirectionSlot: NE, N, NW, W, CENTER, E, SE, S, SW
LINEAR_WEIGHTS = np.array([0.7, 1.0, 0.7, 0.0, 0.0, 0.0, -0.7, -1.0, -0.7])
ANGULAR_WEIGHTS = np.array([0.7, 0.0, -0.7, 1.0, 0.0, -1.0, 0.7, 0.0, -0.7])

# ros1
TWIST_SCHEMA_ROS_1 = 'geometry_msgs/Twist'
TWIST_SCHEMA_STAMPED_ROS_1 = 'geometry_msgs/TwistStamped'

# ros2
TWIST_SCHEMA_ROS_2 = 'geometry_msgs/msg/Twist'
TWIST_SCHEMA_STAMPED_ROS_2 = 'geometry_msgs/msg/TwistStamped'

BARE_SCHEMAS = (TWIST_SCHEMA_ROS_1, TWIST_SCHEMA_ROS_2)
STAMPED_SCHEMAS = (TWIST_SCHEMA_STAMPED_ROS_1, TWIST_SCHEMA_STAMPED_ROS_2)
TWIST_SCHEMAS = BARE_SCHEMAS + STAMPED_SCHEMAS

Topic = namedtuple('Topic', ['name', 'schema_name'])


class UnknownSchemaError(ValueError):
    """Raised when a message cannot be shaped for the requested schema."""

    def __init__(self, schema_name):
        super().__init__('Unknown message schema: %r' % (schema_name,))
        self.schema_name = schema_name


def blend(held):
    """Average the weights of the held slots.

    Returns ``(linear, angular)``. With nothing held both values are 0.0.
    """
    mask = np.asarray(held, dtype=bool)
    n = int(mask.sum())
    if n == 0:
        n = 1
    linear = LINEAR_WEIGHTS[mask].sum() / n
    angular = ANGULAR_WEIGHTS[mask].sum() / n
    return float(linear), float(angular)


def compute_speeds(held, config):
    linear, angular = blend(held)
    return linear * config.max_linear_speed, angular * config.max_angular_speed


def build_message(schema_name, linear_speed, angular_speed):
    twist = {
        'linear': {'x': linear_speed, 'y': 0.0, 'z': 0.0},
        'angular': {'x': 0.0, 'y': 0.0, 'z': angular_speed},
    }
    if schema_name in STAMPED_SCHEMAS:
        return {
            'header': {'stamp': {'sec': 0, 'nsec': 0}, 'frame_id': ''},
            'twist': twist,
        }
    if schema_name in BARE_SCHEMAS:
        return twist
    raise UnknownSchemaError(schema_name)


def make_command(held, config, schema_name):
    """Velocity message for a key snapshot under the given config."""
    linear_speed, angular_speed = compute_speeds(held, config)
    return build_message(schema_name, linear_speed, angular_speed)


def filter_twist_topics(topics):
    return [topic for topic in topics if topic.schema_name in TWIST_SCHEMAS]


def find_topic(topics, name):
    for topic in topics:
        if topic.name == name:
            return topic
    return None
