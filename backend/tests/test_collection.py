"""
Rent The Moment Backend — Filter Value Coercer Tests
===================================================

What:  Each coercer either returns a typed value or raises ValidationFailure;
       ListingService relies on that contract to drop bad filter terms.
"""

import uuid

import pytest

from rentmoment.exceptions import ValidationFailure
from rentmoment.models.product import PRODUCT_SIZES
from rentmoment.services.collection import as_bool, as_float, as_str, as_uuid, one_of


class TestCoercers:
    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("YES", True),
                                              ("false", False), ("0", False), ("off", False)])
    def test_as_bool(self, raw, expected):
        assert as_bool(raw) is expected

    def test_as_bool_rejects_junk(self):
        with pytest.raises(ValidationFailure):
            as_bool("maybe")

    def test_as_float(self):
        assert as_float("12.5") == 12.5
        assert as_float(3) == 3.0

    @pytest.mark.parametrize("raw", ["abc", "nan", "inf", True, None])
    def test_as_float_rejects(self, raw):
        with pytest.raises(ValidationFailure):
            as_float(raw)

    def test_as_uuid(self):
        value = uuid.uuid4()
        assert as_uuid(str(value)) == value
        assert as_uuid(value) is value
        with pytest.raises(ValidationFailure):
            as_uuid("12345")

    def test_as_str_strips(self):
        assert as_str("  silk ") == "silk"
        with pytest.raises(ValidationFailure):
            as_str("   ")

    def test_one_of_returns_canonical_spelling(self):
        size = one_of(PRODUCT_SIZES)
        assert size("free size") == "Free Size"
        assert size("xl") == "XL"
        with pytest.raises(ValidationFailure, match="not one of"):
            size("XXXL")
