"""Request controllers for the image service."""
