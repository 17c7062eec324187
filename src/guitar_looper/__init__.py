"""
Guitar Looper - practice along with videos using named A/B loops and chapters
"""

__version__ = "0.1.0"
