"""
API routers for SongQueue
"""
