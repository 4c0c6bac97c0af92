from setuptools import setup, find_packages

package_name = 'gesture_presenter'

setup(
    name='gesture-presenter',
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'setuptools',
        'numpy>=1.24',
        'opencv-python>=4.8',
        'mediapipe>=0.10.9,<0.10.30',
        'httpx>=0.27',
    ],
    extras_require={
        'test': ['pytest>=7.4'],
    },
    zip_safe=True,
    description='Hand gesture remote that posts slide gestures to a presenter endpoint',
    license='MIT',
    entry_points={
        'console_scripts': [
            'gesture-presenter = ' + package_name + '.main:main',
        ],
    },
)
