"""Request controllers for the identity service."""
