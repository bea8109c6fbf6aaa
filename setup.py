#!/usr/bin/env python
"""Setuptools distribution file."""
import os
from setuptools import setup


def _get_here(fname):
    return os.path.join(os.path.dirname(__file__), fname)


def _get_long_description(fname, encoding='utf8'):
    with open(fname, 'r', encoding=encoding) as fin:
        return fin.read()


def _get_install_requires(fname):
    with open(fname, 'r') as fin:
        return [line.strip() for line in fin
                if line.strip() and not line.startswith('#')]


setup(name='telnetlite',
      version='0.1.0',
      license='ISC',
      description="Python 3 asyncio Telnet client protocol core",
      long_description=_get_long_description(fname=_get_here('README.rst')),
      packages=['telnetlite', 'telnetlite.tests'],
      package_data={'': ['README.rst', 'requirements.txt'], },
      install_requires=_get_install_requires(_get_here('requirements.txt')),
      extras_require={
          'test': ['pytest', 'pytest-asyncio'],
      },
      python_requires='>=3.8',
      entry_points={
         'console_scripts': [
             'telnetlite-client = telnetlite.client:main'
         ]},
      platforms='any',
      zip_safe=True,
      keywords=', '.join(('telnet', 'client', 'rfc854', 'rfc1143',
                          'negotiation', 'asyncio')),
      classifiers=['License :: OSI Approved :: ISC License (ISCL)',
                   'Programming Language :: Python :: 3',
                   'Intended Audience :: Developers',
                   'Development Status :: 4 - Beta',
                   'Topic :: System :: Networking',
                   'Topic :: Terminals :: Telnet',
                   'Topic :: Internet',
                   ],
      )
