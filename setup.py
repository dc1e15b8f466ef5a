#!/usr/bin/env python

# All the meta data (and the dependencies) are in pyproject.toml. setup.py
# is only here to install the command-line script in bin/.

from setuptools import setup
setup(
      scripts = ["bin/ftsintensity"],
      )
