"""Tests for :mod:`identity`."""
