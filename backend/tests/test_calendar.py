"""Tests for the trading calendar."""

from datetime import date, datetime, timedelta, timezone

from navcore.calendar import MARKET_TZ, TradingCalendar, to_market_date


class TestNonTradingDay:
    def test_weekend_is_non_trading(self, calendar):
        assert calendar.is_non_trading_day(date(2025, 3, 8))  # Saturday
        assert calendar.is_non_trading_day(date(2025, 3, 9))  # Sunday

    def test_listed_weekday_holiday_is_non_trading(self, calendar):
        assert calendar.is_holiday(date(2025, 3, 14))
        assert calendar.is_non_trading_day(date(2025, 3, 14))

    def test_unlisted_weekday_is_trading(self, calendar):
        assert not calendar.is_non_trading_day(date(2025, 3, 13))
        assert calendar.is_trading_day(date(2025, 3, 13))

    def test_empty_calendar_only_skips_weekends(self):
        cal = TradingCalendar()
        week = [date(2025, 3, 10) + timedelta(days=i) for i in range(7)]
        assert [cal.is_trading_day(d) for d in week] == [True] * 5 + [False] * 2


class TestMarketOffset:
    def test_naive_date_unchanged(self):
        assert to_market_date(date(2025, 3, 14)) == date(2025, 3, 14)

    def test_utc_evening_is_next_market_day(self):
        # 20:00 UTC on the 13th is 01:30 IST on the 14th
        moment = datetime(2025, 3, 13, 20, 0, tzinfo=timezone.utc)
        assert to_market_date(moment) == date(2025, 3, 14)

    def test_naive_datetime_treated_as_utc(self):
        assert to_market_date(datetime(2025, 3, 13, 19, 0)) == date(2025, 3, 14)

    def test_holiday_matched_after_offset_conversion(self, calendar):
        moment = datetime(2025, 3, 13, 18, 45, tzinfo=timezone.utc)
        assert calendar.is_holiday(moment)

    def test_datetime_holidays_normalized(self):
        holiday = datetime(2025, 3, 14, 0, 0, tzinfo=MARKET_TZ)
        cal = TradingCalendar([holiday])
        assert cal.holidays == frozenset({date(2025, 3, 14)})


class TestWalkBack:
    def test_skips_weekend_and_keeps_offsets(self):
        cal = TradingCalendar()
        anchor = date(2025, 3, 12)  # Wednesday
        assert list(cal.walk_back(anchor, 1, 5)) == [
            (1, date(2025, 3, 11)),
            (2, date(2025, 3, 10)),
            (5, date(2025, 3, 7)),
        ]

    def test_offset_zero_includes_anchor(self):
        cal = TradingCalendar()
        assert list(cal.walk_back(date(2025, 3, 12), 0, 0)) == [(0, date(2025, 3, 12))]

    def test_skips_holidays(self, calendar):
        days = [d for _, d in calendar.walk_back(date(2025, 3, 17), 1, 4)]
        assert date(2025, 3, 14) not in days
        assert days == [date(2025, 3, 13)]

    def test_empty_range(self):
        assert list(TradingCalendar().walk_back(date(2025, 3, 12), 3, 2)) == []
