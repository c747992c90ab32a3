"""Tests for chat history helpers."""

from datetime import date, datetime, timedelta

from psaich_chat.history import collect_chat_dates, day_bounds, filter_chat_dates, format_chat_date


class TestDayBounds:
    def test_covers_whole_local_day(self) -> None:
        day = date(2024, 3, 5)
        start, end = day_bounds(day)

        assert start.date() == day
        assert end.date() == day
        assert start <= datetime(2024, 3, 5, 0, 0).astimezone() <= end
        assert start <= datetime(2024, 3, 5, 23, 59, 59).astimezone() <= end

    def test_excludes_neighbouring_days(self) -> None:
        start, end = day_bounds(date(2024, 3, 5))
        assert datetime(2024, 3, 4, 23, 59, 59).astimezone() < start
        assert datetime(2024, 3, 6, 0, 0).astimezone() > end


class TestCollectChatDates:
    def test_distinct_dates_newest_first(self) -> None:
        timestamps = [
            datetime(2024, 3, 5, 9, 0),
            datetime(2024, 3, 5, 21, 0),
            datetime(2024, 2, 28, 12, 0),
            datetime(2024, 3, 10, 12, 0),
        ]
        assert collect_chat_dates(timestamps, today=date(2024, 3, 20)) == [
            "2024-03-10",
            "2024-03-05",
            "2024-02-28",
        ]

    def test_skips_today_and_missing_timestamps(self) -> None:
        today = date(2024, 3, 20)
        timestamps = [
            datetime(2024, 3, 20, 8, 0),
            None,
            datetime(2024, 3, 19, 8, 0),
        ]
        assert collect_chat_dates(timestamps, today=today) == ["2024-03-19"]

    def test_empty(self) -> None:
        assert collect_chat_dates([], today=date.today() - timedelta(days=1)) == []


class TestFilterChatDates:
    DATES = ["2024-03-10", "2024-03-05", "2024-02-28"]

    def test_format(self) -> None:
        assert format_chat_date("2024-03-05") == "March 5, 2024"

    def test_month_search_is_case_insensitive(self) -> None:
        assert filter_chat_dates(self.DATES, "MARCH") == ["2024-03-10", "2024-03-05"]

    def test_day_search(self) -> None:
        assert filter_chat_dates(self.DATES, "february 28") == ["2024-02-28"]

    def test_empty_search_keeps_all(self) -> None:
        assert filter_chat_dates(self.DATES, "") == self.DATES
