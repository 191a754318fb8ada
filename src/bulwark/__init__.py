"""
Bulwark - error-isolation boundaries with retry, fallback and metrics.

- bulwark.core: error taxonomy, structured logging, settings
- bulwark.execution: Boundary, BoundaryConfig, ErrorContext
"""

__version__ = "0.1.0"

from bulwark.core import *  # noqa
from bulwark.execution import *  # noqa
