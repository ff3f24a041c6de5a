import math

import pytest

from outfit_suggestion.outfit_advisor import (
    RAIN_NOTE_HEAVY, RAIN_NOTE_LIGHT, build_outfit_advice, format_warmth_score,
)


@pytest.mark.parametrize("feels_like, warmth", [
    (35.0, 1.0),
    (33.0, 1.0),
    (32.9, 1.5),
    (27.0, 1.5),
    (22.0, 2.0),
    (21.99, 3.0),
    (17.0, 3.0),
    (12.0, 3.5),
    (7.0, 4.0),
    (6.9, 5.0),
    (-3.0, 5.0),
])
def test_band_lower_bounds_are_inclusive(feels_like, warmth):
    assert build_outfit_advice(30.0, feels_like, 0.0).warmth_score == warmth


def test_feels_like_takes_precedence_over_temperature():
    assert build_outfit_advice(30.0, 10.0, 0.0).warmth_score == 4.0
    assert build_outfit_advice(30.0, None, 0.0).warmth_score == 1.5


@pytest.mark.parametrize("temperature, feels_like", [(None, None), (math.nan, None), (20.0, math.nan)])
def test_missing_or_nan_input_lands_in_coldest_band(temperature, feels_like):
    advice = build_outfit_advice(temperature, feels_like, None)
    assert advice.warmth_score == 5.0
    assert advice.top


@pytest.mark.parametrize("pop, note", [
    (None, None),
    (0.0, None),
    (0.19, None),
    (0.2, RAIN_NOTE_LIGHT),
    (0.49, RAIN_NOTE_LIGHT),
    (0.5, RAIN_NOTE_HEAVY),
    (1.0, RAIN_NOTE_HEAVY),
])
def test_rain_note_thresholds(pop, note):
    assert build_outfit_advice(25.0, 25.0, pop).rain_note == note


def test_format_warmth_score_drops_trailing_zero():
    assert format_warmth_score(1.5) == "1.5 / 5"
    assert format_warmth_score(2.0) == "2 / 5"
