"""
Command line interface - a thin caller of the scheduling service.
"""
