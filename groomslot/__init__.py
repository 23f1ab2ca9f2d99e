"""
groomslot - appointment availability engine for a pet-grooming salon.
"""

__version__ = "0.1.0"
