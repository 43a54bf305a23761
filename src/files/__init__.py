"""Uploaded file storage for downloads, sharing, and music."""
