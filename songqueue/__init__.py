"""
SongQueue - song submission queues for TikTok music reviewers
"""
__version__ = "1.0.0"
