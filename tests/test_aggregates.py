import pytest

from evie import aggregates as agg
from tests.factories import rec


def _counts_by_year(counts):
    rows = []
    for year, n in counts.items():
        rows.extend(rec(year=str(year), rng="100") for _ in range(n))
    return rows


def test_make_distribution_scenario():
    data = [rec(make="Tesla") for _ in range(6)] + [rec(make="Nissan") for _ in range(4)]
    out = agg.make_distribution(data)
    assert [(e.name, e.value, e.percentage) for e in out] == [("Tesla", 6, "60.0"), ("Nissan", 4, "40.0")]


def test_make_distribution_truncates_to_top_ten():
    data = []
    for i in range(12):
        data.extend(rec(make=f"MAKE{i:02d}") for _ in range(i + 1))
    out = agg.make_distribution(data)
    assert len(out) == 10
    assert out[0].name == "MAKE11"
    assert out[-1].name == "MAKE02"
    assert sum(float(e.percentage) for e in out) < 100.0


def test_make_distribution_ties_keep_first_seen_order():
    data = [rec(make="B"), rec(make="A"), rec(make="A"), rec(make="B"), rec(make="C")]
    assert [e.name for e in agg.make_distribution(data)] == ["B", "A", "C"]


def test_county_distribution(dataset):
    out = agg.county_distribution(dataset)
    assert [e.name for e in out] == ["King", "Snohomish", "Pierce"]
    king = out[0]
    assert king.value == 3
    # 266 + 151 + 0 over 3
    assert king.avg_range == 139
    assert king.unique_makes == 2
    assert king.percentage == "50.0"
    assert sum(float(e.percentage) for e in out) == pytest.approx(100.0, abs=0.2)


def test_range_by_make(dataset):
    out = agg.range_by_make(dataset)
    assert [e.make for e in out] == ["NISSAN", "TESLA", "CHEVROLET"]
    nissan, tesla = out[0], out[1]
    assert nissan.average_range == 150
    assert nissan.model_count == 1
    assert nissan.year_span == 2
    assert tesla.average_range == 89
    assert tesla.model_count == 3
    assert tesla.year_span == 2
    assert tesla.total_vehicles == 3
    assert tesla.market_share == "50.0"


def test_model_year_distribution(dataset):
    out = agg.model_year_distribution(dataset)
    assert [e.year for e in out] == ["2017", "2018", "2020", "2021"]
    y2020 = out[2]
    assert y2020.count == 3
    assert y2020.avg_range == 138
    assert y2020.percentage == "50.0"


def test_growth_rate_scenario():
    data = _counts_by_year({2019: 150, 2018: 100, 2020: 120})
    out = agg.growth_rates(data)
    assert [(p.year, p.total) for p in out] == [(2018, 100), (2019, 150), (2020, 120)]
    assert [p.growth for p in out] == [0, 50.0, -20.0]


def test_growth_rate_rounds_to_one_decimal():
    out = agg.growth_rates(_counts_by_year({2020: 3, 2021: 4}))
    assert out[1].growth == 33.3


def test_invalid_years_group_under_zero(make_record):
    out = agg.growth_rates([make_record(year="n/a"), make_record(year="2020")])
    assert [p.year for p in out] == [0, 2020]


def test_range_evolution_uses_middle_index_median():
    data = [rec(year="2020", rng=str(v)) for v in (40, 10, 30, 20)]
    data.append(rec(year="2019", make="NISSAN", model="LEAF", rng="80"))
    out = agg.range_evolution(data)
    assert [e.year for e in out] == [2019, 2020]
    y = out[1]
    assert y.median_range == 30
    assert y.average_range == 25
    assert y.model_count == 1
    assert y.total_vehicles == 4


def test_year_share_sums_to_hundred():
    out = agg.year_share(_counts_by_year({2018: 1, 2019: 1, 2020: 2}))
    assert [(s.year, s.count, s.share) for s in out] == [(2018, 1, "25.0"), (2019, 1, "25.0"), (2020, 2, "50.0")]


def test_make_growth_between_last_two_years():
    data = (
        [rec(make="TESLA", year="2019") for _ in range(2)]
        + [rec(make="TESLA", year="2020") for _ in range(3)]
        + [rec(make="NISSAN", year="2019") for _ in range(4)]
        + [rec(make="NISSAN", year="2020") for _ in range(2)]
        + [rec(make="KIA", year="2021")]
    )
    out = agg.make_growth(data)
    assert [(m.make, m.growth) for m in out] == [("TESLA", 50.0), ("KIA", 0.0), ("NISSAN", -50.0)]
    tesla = out[0]
    assert (tesla.previous_year, tesla.year, tesla.previous_count, tesla.count) == (2019, 2020, 2, 3)
    kia = out[1]
    assert kia.previous_year == kia.year == 2021


def test_make_growth_series():
    series = agg.make_growth_series([rec(make="KIA", year="2020"), rec(make="KIA", year="2021"),
                                     rec(make="KIA", year="2021")])
    assert [(p.year, p.total, p.growth) for p in series["KIA"]] == [(2020, 1, 0.0), (2021, 2, 100.0)]


def test_range_highlights():
    data = [rec(year="2015", rng="100"), rec(year="2020", rng="250"), rec(year="2020", model="MODEL Y", rng="250")]
    h = agg.range_highlights(data)
    assert h.latest_year == 2020
    assert h.latest_average_range == 250
    assert h.latest_model_count == 2
    assert h.range_improvement == 150.0


@pytest.mark.parametrize("fn", [
    agg.make_distribution, agg.county_distribution, agg.range_by_make, agg.model_year_distribution,
    agg.growth_rates, agg.range_evolution, agg.year_share, agg.make_growth,
])
def test_aggregates_on_empty_dataset(fn):
    assert fn([]) == []


def test_range_highlights_empty():
    h = agg.range_highlights([])
    assert (h.latest_year, h.latest_average_range, h.range_improvement) == (0, 0, 0.0)
