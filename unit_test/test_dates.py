import pandas as pd
import pytest

from shipment_query.dates import resolve_date_phrase


def test_today_covers_the_whole_day(today):
    rng = resolve_date_phrase("Today", today=today)
    assert rng.start == pd.Timestamp("2025-03-14 00:00:00")
    assert rng.contains(pd.Timestamp("2025-03-14 23:59:59"))
    assert not rng.contains(pd.Timestamp("2025-03-15 00:00:00"))


def test_yesterday(today):
    rng = resolve_date_phrase("yesterday", today=today)
    assert rng.start == pd.Timestamp("2025-03-13")
    assert rng.contains(pd.Timestamp("2025-03-13 18:00"))


@pytest.mark.parametrize("phrase", ["last week", "past week", "  Last   Week "])
def test_last_week_is_seven_days_ending_today(phrase, today):
    rng = resolve_date_phrase(phrase, today=today)
    assert rng.start == pd.Timestamp("2025-03-08")
    assert rng.end.normalize() == today
    assert (rng.end.normalize() - rng.start).days + 1 == 7


def test_last_month(today):
    rng = resolve_date_phrase("past month", today=today)
    assert rng.start == pd.Timestamp("2025-02-14")
    assert rng.end.normalize() == today


def test_this_week_starts_on_sunday(today):
    rng = resolve_date_phrase("this week", today=today)
    assert rng.start == pd.Timestamp("2025-03-09")
    assert rng.end.normalize() == pd.Timestamp("2025-03-15")


@pytest.mark.parametrize(
    "phrase, day",
    [
        ("03/14/2025", "2025-03-14"),
        ("3/4/2025", "2025-03-04"),
        ("2025/03/14", "2025-03-14"),
        ("2025-03-14", "2025-03-14"),
        ("12/25", "2025-12-25"),
    ],
)
def test_explicit_dates(phrase, day, today):
    rng = resolve_date_phrase(phrase, today=today)
    assert rng.start == pd.Timestamp(day)
    assert rng.end.normalize() == pd.Timestamp(day)


def test_month_names(today):
    march = resolve_date_phrase("march", today=today)
    assert march.start == pd.Timestamp("2025-03-01")
    assert march.end.normalize() == pd.Timestamp("2025-03-31")

    feb = resolve_date_phrase("Feb 2024", today=today)
    assert feb.start == pd.Timestamp("2024-02-01")
    assert feb.end.normalize() == pd.Timestamp("2024-02-29")


@pytest.mark.parametrize("phrase", ["banana", "", None, "02/30/2024", "13/01/2025", "march madness",
                                    "10-12", "3-4-2025", "2025/03-14"])
def test_unrecognised_phrases_are_none(phrase, today):
    assert resolve_date_phrase(phrase, today=today) is None
