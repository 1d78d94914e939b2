"""
Applitrack - job application tracking library.

Record model, search/filter/sort pipeline, status automation and the
key-value storage collaborators that persist records between sessions.
"""

__version__ = "0.1.0"
