"""
Botpath: spline path editing over Source engine maps.
"""
