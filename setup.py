#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Legacy entry point for bssvol; all metadata lives in pyproject.toml.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
