# skillswap/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .auth import *
from .user import *
from .skill import *
from .swap import *
from .rating import *
from .admin import *
