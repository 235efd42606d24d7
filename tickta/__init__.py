# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version as _version

try:
    version = _version("tickta")
except PackageNotFoundError:
    version = "0.0.0"

from tickta.stateful import *
from tickta.stateful import __all__ as stateful_all

# Flat Structure. Supports ta.rsi() or ta.stateful.rsi()
__all__ = ["version"] + stateful_all
