from setuptools import setup

package_name = 'teleop_keys'

setup(
    name=package_name,
    version='0.1.0',
    packages=[package_name],
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
    ],
    install_requires=['setuptools', 'numpy', 'pynput', 'PyYAML'],
    zip_safe=True,
    maintainer='tello',
    maintainer_email='ple4ga@bosch.com',
    description='Keyboard teleoperation publishing Twist/TwistStamped velocity commands',
    license='MIT',
    extras_require={
        'test': [
            'pytest',
        ],
    },
    tests_require=['pytest'],
    entry_points={
        'console_scripts': [
            'teleop_twist_keys = teleop_keys.teleop_twist_node:main'
        ],
    },
)
