"""
Geometry generators.
"""
