"""Food Tracker API - photo-based nutrition estimates and daily eating summaries."""

__version__ = "1.0.0"
