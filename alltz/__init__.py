"""
alltz - Terminal timezone dashboard with a scrubbable shared timeline
"""

__version__ = "0.2.0"
