"""Processes that coordinate the image store and the record store."""
