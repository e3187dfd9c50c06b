"""
Property-based tests with Hypothesis for pricing, discounts and slugs.
"""

import re
from datetime import datetime, timedelta, timezone

from hypothesis import assume, given, settings, strategies as st

from rest_api.models import Coupon, Reservation
from shared.config.constants import DiscountType, ReservationRules
from shared.security.totp import generate_backup_codes, hash_backup_code, normalize_backup_code
from shared.utils.validators import slugify

START = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)

money = st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False)


class TestReservationPriceProperties:

    @given(minutes=st.integers(min_value=1, max_value=60))
    def test_first_hour_costs_base_price(self, minutes):
        end = START + timedelta(minutes=minutes)
        assert Reservation.calculate_price(START, end) == ReservationRules.BASE_PRICE

    @given(minutes=st.integers(min_value=1, max_value=24 * 60))
    def test_price_follows_started_extra_hours(self, minutes):
        price = Reservation.calculate_price(START, START + timedelta(minutes=minutes))
        extra = (price - ReservationRules.BASE_PRICE) / ReservationRules.EXTRA_HOUR_PRICE

        assert extra == int(extra)
        # extra hours cover the time past the first hour, with less than one hour to spare
        assert 0 <= 60 + extra * 60 - max(minutes, 60) < 60

    @given(
        a=st.integers(min_value=1, max_value=24 * 60),
        b=st.integers(min_value=1, max_value=24 * 60),
    )
    def test_longer_bookings_never_cost_less(self, a, b):
        assume(a <= b)
        short = Reservation.calculate_price(START, START + timedelta(minutes=a))
        long = Reservation.calculate_price(START, START + timedelta(minutes=b))
        assert short <= long


class TestCouponDiscountProperties:

    @given(
        subtotal=money,
        percent=st.floats(min_value=0.01, max_value=100, allow_nan=False),
        cap=st.one_of(st.none(), st.floats(min_value=0.01, max_value=500, allow_nan=False)),
    )
    def test_percentage_discount_bounded(self, subtotal, percent, cap):
        coupon = Coupon(
            discount_type=DiscountType.PERCENTAGE,
            discount_value=percent,
            max_discount=cap,
        )
        discount = coupon.calculate_discount(subtotal)

        assert 0 <= discount <= round(subtotal, 2) + 0.01
        if cap is not None:
            assert discount <= round(cap, 2) + 0.01

    @given(subtotal=money, value=st.floats(min_value=0.01, max_value=10_000, allow_nan=False))
    def test_fixed_discount_never_exceeds_subtotal(self, subtotal, value):
        coupon = Coupon(discount_type=DiscountType.FIXED, discount_value=value)
        discount = coupon.calculate_discount(subtotal)

        assert 0 <= discount <= round(subtotal, 2) + 0.01
        assert discount <= round(value, 2) + 0.01


class TestSlugProperties:

    @given(st.text(max_size=60))
    def test_slug_charset(self, value):
        slug = slugify(value)
        assert re.fullmatch(r"([a-z0-9]+(-[a-z0-9]+)*)?", slug)

    @given(st.text(max_size=60))
    def test_slugify_is_idempotent(self, value):
        slug = slugify(value)
        assert slugify(slug) == slug


class TestBackupCodeProperties:

    @settings(max_examples=25)
    @given(count=st.integers(min_value=1, max_value=20))
    def test_generated_format(self, count):
        codes = generate_backup_codes(count)

        assert len(codes) == count
        assert all(re.fullmatch(r"[0-9A-F]{4}-[0-9A-F]{4}", c) for c in codes)

    @given(st.text(alphabet="0123456789abcdefABCDEF", min_size=8, max_size=8))
    def test_hash_ignores_case_and_dash(self, raw):
        dashed = f"{raw[:4]}-{raw[4:]}"
        assert hash_backup_code(dashed) == hash_backup_code(raw.lower())
        assert normalize_backup_code(dashed) == raw.upper()
