"""
OGCS CRM - Contact normalization tests
Tests: normalize_phone / normalize_email + the dedup query built from them.
Run: cd backend && pytest tests/test_phone_normalization.py -v
"""

import pytest

from config import normalize_phone, normalize_email
from services.lead_registry import duplicate_query


# ═══════════════════════════════════════════════════════════════
# 1. PHONE
# ═══════════════════════════════════════════════════════════════

class TestNormalizePhone:

    def test_indian_mobile_with_country_code(self):
        """+91 98765-43210 -> last 10 digits."""
        assert normalize_phone("+91 98765-43210") == "9876543210"

    def test_plain_ten_digits(self):
        assert normalize_phone("9876543210") == "9876543210"

    def test_leading_zero_trunk_prefix(self):
        assert normalize_phone("09876543210") == "9876543210"

    def test_short_number_kept_whole(self):
        assert normalize_phone("(022) 2345") == "0222345"

    def test_no_digits_is_empty(self):
        assert normalize_phone("call me") == ""

    def test_none_and_empty(self):
        assert normalize_phone(None) == ""
        assert normalize_phone("") == ""

    def test_int_input(self):
        """Spreadsheet imports send phones as numbers."""
        assert normalize_phone(919876543210) == "9876543210"

    @pytest.mark.parametrize("raw", [
        "+91 98765 43210", "98765-43210", "0091 (987) 654-3210", "12", "", "abc",
    ])
    def test_idempotent(self, raw):
        once = normalize_phone(raw)
        assert normalize_phone(once) == once

    def test_formats_of_same_number_collide(self):
        assert normalize_phone("+91 98765 43210") == normalize_phone("098765-43210")

    def test_only_ascii_digits_kept(self):
        """Fullwidth or superscript digits are dropped like any other symbol."""
        assert normalize_phone("９８７６５４３２１０") == ""
        assert normalize_phone("98765²43210") == "9876543210"


# ═══════════════════════════════════════════════════════════════
# 2. EMAIL
# ═══════════════════════════════════════════════════════════════

class TestNormalizeEmail:

    def test_trim_and_lower(self):
        assert normalize_email("  Ravi.K@Example.COM ") == "ravi.k@example.com"

    def test_none_is_empty(self):
        assert normalize_email(None) == ""


# ═══════════════════════════════════════════════════════════════
# 3. DUPLICATE QUERY
# ═══════════════════════════════════════════════════════════════

class TestDuplicateQuery:

    def test_no_contact_means_no_check(self):
        assert duplicate_query("owner-1", "", "") is None

    def test_phone_only(self):
        q = duplicate_query("owner-1", "9876543210", "")
        assert q == {"ownerId": "owner-1", "$or": [{"normalizedPhone": "9876543210"}]}

    def test_phone_or_email(self):
        q = duplicate_query("owner-1", "9876543210", "a@b.com")
        assert q["$or"] == [{"normalizedPhone": "9876543210"}, {"email": "a@b.com"}]

    def test_exclude_self(self):
        q = duplicate_query("owner-1", "", "a@b.com", exclude_id="lead-1")
        assert q["id"] == {"$ne": "lead-1"}
