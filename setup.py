"""
Setup script for robo-position package.

This package provides the motion control and localization core of a
simulated mobile-robot base, with differential and omnidirectional drive
kinematics and exact or dead-reckoning localization.
"""

from setuptools import setup, find_packages
import os

# Read long description from README
here = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

# Read requirements
with open(os.path.join(here, 'requirements.txt'), encoding='utf-8') as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

# Extract core requirements (exclude dev dependencies)
core_requirements = []
dev_requirements = []

for req in requirements:
    if any(dev_pkg in req for dev_pkg in ['pytest', 'black', 'flake8', 'mypy', 'sphinx']):
        dev_requirements.append(req)
    else:
        core_requirements.append(req)

setup(
    name='robo-position',
    version='1.0.0',
    description='Motion Control and Localization for Simulated Mobile Robot Bases',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='Robo Localization Team',
    author_email='team@robo-localization.org',
    url='https://github.com/robo-localization/robo-position',

    packages=find_packages(where='src'),
    package_dir={'': 'src'},

    # Core dependencies
    install_requires=core_requirements,

    # Optional dependencies
    extras_require={
        'dev': dev_requirements,
        'test': dev_requirements,
        'all': dev_requirements,
    },

    # Python version requirement
    python_requires='>=3.8',

    # Package data
    include_package_data=True,

    # Entry points for command line usage
    entry_points={
        'console_scripts': [
            'robo-position=robo_position.main:main',
        ],
    },

    # Classifiers for PyPI
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'Intended Audience :: Developers',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Operating System :: OS Independent',
    ],

    # Keywords for searchability
    keywords='robotics simulation localization odometry dead-reckoning differential-drive omnidirectional',

    # Project URLs
    project_urls={
        'Bug Reports': 'https://github.com/robo-localization/robo-position/issues',
        'Source': 'https://github.com/robo-localization/robo-position',
    },
)
