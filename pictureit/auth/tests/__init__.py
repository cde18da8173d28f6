"""Tests for :mod:`pictureit.auth`."""
