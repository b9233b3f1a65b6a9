"""Mini App backend API."""
