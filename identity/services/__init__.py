"""Service integrations for the identity service."""
