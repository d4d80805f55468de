"""
Interior Tracker - interior-design project catalogue
"""
__version__ = "0.1.0"
