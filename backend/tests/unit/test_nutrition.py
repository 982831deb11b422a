import pytest

from mealplan.utils.nutrition import (
    Nutrients,
    nutrients_for_amount,
    round_half_up,
    round_nutrients,
    sum_nutrients,
)


def test_nutrients_for_amount_basic():
    n = nutrients_for_amount(200, 10, 5, 30, amount=150)
    assert n.calories == 300
    assert n.proteins == 15
    assert n.fats == 7.5
    assert n.carbs == 45


def test_nutrients_for_amount_missing_rates_and_negative_amount():
    n = nutrients_for_amount(None, None, 4, None, amount=50)
    assert (n.calories, n.proteins, n.fats, n.carbs) == (0, 0, 2, 0)

    clamped = nutrients_for_amount(100, 10, 10, 10, amount=-50)
    assert clamped == Nutrients()


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (66.0, 66), (-0.5, -1), (0.0, 0)],
)
def test_round_half_up_rounds_halves_away_from_zero(value, expected):
    assert round_half_up(value) == expected


def test_totals_round_once_after_summing():
    # three items of 0.5 kcal each: shown as 1 kcal apiece, 2 kcal in total
    items = [nutrients_for_amount(10, 0, 0, 0, amount=5) for _ in range(3)]
    shown = [round_nutrients(n).calories for n in items]
    total = round_nutrients(sum_nutrients(items))
    assert shown == [1, 1, 1]
    assert total.calories == 2


def test_nutrients_to_dict_casts_numbers():
    n = Nutrients(calories=123.456, proteins=30, fats=0, carbs=7)
    assert n.to_dict() == {
        "calories": 123.456,
        "proteins": 30.0,
        "fats": 0.0,
        "carbs": 7.0,
    }
