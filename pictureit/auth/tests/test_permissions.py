"""Tests for :mod:`pictureit.auth.permissions`."""

from unittest import TestCase

from hypothesis import given
from hypothesis import strategies as st

from pictureit.domain import Permission

from .. import permissions

masks = st.sampled_from(permissions.VALID_MASKS)


class TestHasCapability(TestCase):
    """Tests for :func:`permissions.has_capability`."""

    @given(masks, masks)
    def test_every_bit_required(self, mask, required):
        """True exactly when every bit of ``required`` is set in ``mask``."""
        expected = all(mask & bit for bit in (1, 2, 4, 8) if required & bit)
        self.assertEqual(permissions.has_capability(mask, required), expected)

    @given(masks)
    def test_mask_has_its_own_bits(self, mask):
        """A mask has every capability it is made of."""
        for perm in permissions.split(mask):
            self.assertTrue(permissions.has_capability(mask, perm))
        self.assertTrue(permissions.has_capability(mask, mask))

    def test_combined_flags(self):
        """Flags combine with ``|``."""
        mask = Permission.READ | Permission.UPDATE
        self.assertTrue(permissions.has_capability(mask, Permission.UPDATE))
        self.assertFalse(permissions.has_capability(
            mask, Permission.READ | Permission.DELETE
        ))


class TestIsValid(TestCase):
    """Tests for :func:`permissions.is_valid`."""

    def test_valid(self):
        """There are fifteen valid masks."""
        self.assertEqual(len(permissions.VALID_MASKS), 15)
        for mask in range(1, 16):
            self.assertTrue(permissions.is_valid(mask))
        self.assertTrue(permissions.is_valid(permissions.ALL))

    def test_invalid(self):
        """Zero, out-of-range values and non-integers are not masks."""
        for mask in (0, 16, -1, '1', 1.0, None, True):
            self.assertFalse(permissions.is_valid(mask), repr(mask))


class TestLabels(TestCase):
    """Masks can be described to humans."""

    def test_split(self):
        """A mask splits into its capabilities."""
        self.assertEqual(permissions.split(5),
                         [Permission.READ, Permission.UPDATE])

    def test_labels(self):
        """Every capability has a label."""
        for perm in Permission:
            self.assertTrue(permissions.label_for(perm))
