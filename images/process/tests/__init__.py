"""Tests for :mod:`images.process`."""
