"""Service integrations for the image service."""
