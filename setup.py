from setuptools import setup, find_packages
from codecs import open
import os


here = os.path.abspath(os.path.dirname(__file__))


# Get the long description from the README file
with open(os.path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()


# Get the version
for line in open(os.path.join(here, 'dgfct', '__init__.py'), encoding='utf-8'):
    if line.startswith('__version__'):
        version = line.split('=')[1].strip()[1:-1]


# Which packages we depend on
dependencies = ['PyYAML', 'numpy', 'scipy>=1.12']


# No need to install dependencies on ReadTheDocs
if os.environ.get('READTHEDOCS') == 'True':
    dependencies = []


# Give setuptools/pip informattion about the dgfct package
setup(
    name='dgfct',

    # Versions should comply with PEP440.  For a discussion on single-sourcing
    # the version across setup.py and the project code, see
    # https://packaging.python.org/en/latest/single_source_version.html
    version=version,

    description='Flux corrected transport limiters for discontinuous Galerkin advection',
    long_description=long_description,

    # Choose your license
    license='Apache 2.0',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        # How mature is this project? Common values are
        #   3 - Alpha
        #   4 - Beta
        #   5 - Production/Stable
        'Development Status :: 3 - Alpha',

        # Indicate who your project is intended for
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Scientific/Engineering :: Physics',

        # Pick your license as you wish (should match "license" above)
        'License :: OSI Approved :: Apache Software License',

        # Specify the Python versions you support here
        'Programming Language :: Python :: 3',
    ],

    # What does your project relate to?
    keywords='fem dg advection fct limiter monotonicity residual-distribution',

    # You can just specify the packages manually here if your project is
    # simple. Or you can use find_packages().
    packages=find_packages(exclude=['tests', 'tests.*', 'demos']),

    # List run-time dependencies here.  These will be installed by pip when
    # your project is installed.
    install_requires=dependencies,

    # Dependencies of the test suite, install with pip install -e .[test]
    extras_require={
        'test': ['pytest'],
    },

    # To provide executable scripts, use entry points in preference to the
    # "scripts" keyword. Entry points provide cross-platform support and allow
    # pip to create the appropriate form of executable for the target platform.
    entry_points={
        'console_scripts': [
            'dgfct=dgfct.__main__:run_from_console',
        ],
    },
)
