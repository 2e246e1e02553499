#!/usr/bin/env python3
import rclpy
from rclpy.exceptions import InvalidTopicNameException
from rclpy.node import Node
from rcl_interfaces.msg import SetParametersResult
from pynput import keyboard
from geometry_msgs.msg import Twist, TwistStamped

from teleop_keys.command import (TWIST_SCHEMA_ROS_1, TWIST_SCHEMA_ROS_2,
                                 TWIST_SCHEMA_STAMPED_ROS_1, TWIST_SCHEMA_STAMPED_ROS_2,
                                 Topic, filter_twist_topics, find_topic)
from teleop_keys.config import (DEFAULT_MAX_ANGULAR_SPEED, DEFAULT_MAX_LINEAR_SPEED,
                                DEFAULT_PUBLISH_RATE, NUMERIC_FIELDS, EngineConfig, SettingsStore)
from teleop_keys.keys import KeyState, format_key_grid
from teleop_keys.sampler import CommandSampler

MESSAGE_TYPES = {
    TWIST_SCHEMA_ROS_1: Twist,
    TWIST_SCHEMA_ROS_2: Twist,
    TWIST_SCHEMA_STAMPED_ROS_1: TwistStamped,
    TWIST_SCHEMA_STAMPED_ROS_2: TwistStamped,
}


def key_to_char(key):
    try:
        return key.char
    except AttributeError:
        return None  # Special keys (arrows, shift, ...) have no char.


def to_ros_message(schema_name, message):
    msg = MESSAGE_TYPES[schema_name]()
    if 'header' in message:
        # Zero stamp and empty frame id are the message defaults.
        msg.header.frame_id = message['header']['frame_id']
        msg.header.stamp.sec = message['header']['stamp']['sec']
        msg.header.stamp.nanosec = message['header']['stamp']['nsec']
        twist, payload = msg.twist, message['twist']
    else:
        twist, payload = msg, message
    twist.linear.x = float(payload['linear']['x'])
    twist.linear.y = float(payload['linear']['y'])
    twist.linear.z = float(payload['linear']['z'])
    twist.angular.x = float(payload['angular']['x'])
    twist.angular.y = float(payload['angular']['y'])
    twist.angular.z = float(payload['angular']['z'])
    return msg


class RosPublisher:
    """Advertise/publish by topic name on top of rclpy publishers."""

    def __init__(self, node, qos_depth=10):
        self.node = node
        self.qos_depth = qos_depth
        self.publishers = {}

    def advertise(self, topic_name, schema_name):
        msg_type = MESSAGE_TYPES.get(schema_name)
        if msg_type is None:
            # Ticks on this topic will report the unknown schema.
            self.node.get_logger().error('Cannot advertise %s: unknown schema %s' % (topic_name, schema_name))
            return
        self.publishers[topic_name] = (schema_name, self.node.create_publisher(msg_type, topic_name, self.qos_depth))

    def unadvertise(self, topic_name):
        entry = self.publishers.pop(topic_name, None)
        if entry is not None:
            self.node.destroy_publisher(entry[1])

    def publish(self, topic_name, message):
        schema_name, publisher = self.publishers[topic_name]
        publisher.publish(to_ros_message(schema_name, message))


class RosTimer:
    def __init__(self, node, period, callback):
        self.node = node
        self.timer = node.create_timer(period, callback)

    def cancel(self):
        self.timer.cancel()
        self.node.destroy_timer(self.timer)


class TeleopTwistNode(Node):
    def __init__(self, **kwargs):
        super().__init__('teleop_twist_keys', **kwargs)
        self.declare_parameter('topic', 'cmd_vel')
        self.declare_parameter('message_schema', TWIST_SCHEMA_ROS_2)
        self.declare_parameter('publish_rate', DEFAULT_PUBLISH_RATE)
        self.declare_parameter('max_linear_speed', DEFAULT_MAX_LINEAR_SPEED)
        self.declare_parameter('max_angular_speed', DEFAULT_MAX_ANGULAR_SPEED)
        self.declare_parameter('settings_file', '')
        self.declare_parameter('enable_publish', True)

        settings_file = self.get_parameter('settings_file').value
        self.settings = SettingsStore(settings_file, self.get_logger()) if settings_file else None

        config = EngineConfig(
            topic=self.resolve_name(self.get_parameter('topic').value),
            message_schema=self.get_parameter('message_schema').value or None,
            publish_rate=self.get_parameter('publish_rate').value,
            max_linear_speed=self.get_parameter('max_linear_speed').value,
            max_angular_speed=self.get_parameter('max_angular_speed').value,
        )
        if self.settings is not None:
            config = EngineConfig.from_dict(self.settings.load(), base=config)

        enable_publish = self.get_parameter('enable_publish').value
        self.key_state = KeyState()
        self.sampler = CommandSampler(
            self.key_state,
            RosPublisher(self) if enable_publish else None,
            config=config,
            timer_factory=lambda period, callback: RosTimer(self, period, callback),
            logger=self.get_logger(),
            on_error=self.on_publish_error,
        )
        self.add_on_set_parameters_callback(self.on_parameters)

        self.listener = keyboard.Listener(on_press=self.on_press, on_release=self.on_release)
        self.listener.start()

        self.sampler.start()
        self.get_logger().info('Hold u i o / j k l / m , . to drive (max linear %.2f, max angular %.2f, %.1f Hz)'
                               % (config.max_linear_speed, config.max_angular_speed, config.publish_rate))

    def available_topics(self):
        topics = [Topic(name, schema) for name, schemas in self.get_topic_names_and_types()
                  for schema in schemas]
        return filter_twist_topics(topics)

    def resolve_name(self, topic_name):
        # The ROS graph lists fully qualified names such as /cmd_vel.
        if not topic_name:
            return None
        return self.resolve_topic_name(topic_name)

    def on_parameters(self, params):
        changes = {}
        try:
            for param in params:
                if param.name in NUMERIC_FIELDS:
                    changes[param.name] = param.value
                elif param.name == 'topic':
                    changes['topic'] = self.resolve_name(param.value)
                elif param.name == 'message_schema':
                    changes['message_schema'] = param.value or None
        except InvalidTopicNameException as e:
            return SetParametersResult(successful=False, reason=str(e))
        if not changes:
            return SetParametersResult(successful=True)

        if changes.get('topic'):
            topic = find_topic(self.available_topics(), changes['topic'])
            if topic is None:
                # Keep the name so it is saved, but publish nothing.
                self.get_logger().warning('Topic does not exist: %s' % changes['topic'])
                changes['message_schema'] = None
            else:
                changes['message_schema'] = topic.schema_name

        try:
            config = self.sampler.update_config(**changes)
        except ValueError as e:
            return SetParametersResult(successful=False, reason=str(e))

        if self.settings is not None:
            self.settings.save(config)
        return SetParametersResult(successful=True)

    def on_publish_error(self, error):
        self.get_logger().error('Publishing to %s failed: %s' % (self.sampler.topic, error))

    def on_press(self, key):
        if self.key_state.on_key_down(key_to_char(key)):
            self.get_logger().debug('\n' + format_key_grid(self.key_state.snapshot()))

    def on_release(self, key):
        if self.key_state.on_key_up(key_to_char(key)):
            self.get_logger().debug('\n' + format_key_grid(self.key_state.snapshot()))

    def shutdown(self):
        self.listener.stop()
        self.sampler.teardown()


def main(args=None):
    rclpy.init(args=args)
    node = TeleopTwistNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    finally:
        node.shutdown()
        node.destroy_node()
        rclpy.try_shutdown()


if __name__ == '__main__':
    main()
