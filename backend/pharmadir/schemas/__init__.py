# pharmadir/schemas/__init__.py
"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .identity import *
from .auth import *
from .favorites import *
from .comments import *
from .pharmacies import *
