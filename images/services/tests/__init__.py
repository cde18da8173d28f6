"""Tests for :mod:`images.services`."""
