"""
Editing session orchestration.
"""

from .workspace import Workspace

__all__ = [
    'Workspace',
]
