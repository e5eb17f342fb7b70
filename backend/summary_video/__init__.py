"""
Summary video compositor: turns a video summary into a narrated MP4.
"""

__version__ = "1.0.0"
