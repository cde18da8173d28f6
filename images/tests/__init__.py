"""Tests for :mod:`images`."""
