"""Utility helpers for file access, CI context detection and the GitHub API."""
