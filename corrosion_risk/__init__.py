"""
Corrosion Risk — Rating & Classification Engine

Raw soil/site measurements are rated against configurable norms,
combined into output scores (B0, B1, ...) and mapped onto risk classes.
"""

__version__ = "1.0.0"
