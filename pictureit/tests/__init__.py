"""Tests for :mod:`pictureit`."""
