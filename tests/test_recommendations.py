import math

import pytest

from models import TechnicianProfile
from services.recommendations import filter_technicians, rank, score


def tech(name, **fields):
    return TechnicianProfile(name=name, **fields)


def test_rank_empty():
    assert rank([]) == []


def test_score_formula():
    t = tech("A", rating=5, availability=True, review_count=100, completion_rate=100)
    assert score(t) == pytest.approx(50 + 20 + 10 + 15)


def test_review_bonus_is_capped():
    assert score({"rating": 0, "availability": False, "review_count": 10000, "completion_rate": 0}) == 15


def test_defaults_for_missing_fields():
    # rating 4.0, available, no reviews, completion rate 90
    assert score({}) == pytest.approx(40 + 20 + 0 + 13.5)


def test_nan_and_garbage_use_defaults():
    messy = {"rating": math.nan, "review_count": "lots", "completion_rate": None, "availability": None}
    assert score(messy) == score({})


def test_strong_technician_beats_weak_one():
    strong = tech("A", rating=5, availability=True, review_count=100, completion_rate=100)
    weak = tech("B", rating=3, availability=False, review_count=0, completion_rate=50)
    middle = tech("C")
    ranked = rank([weak, middle, strong])
    assert ranked[0] is strong
    assert ranked.index(strong) < ranked.index(weak)
    assert score(strong) > score(weak)


def test_ties_keep_input_order():
    techs = [tech(name) for name in "ABCDE"]
    assert [t.name for t in rank(techs, limit=5)] == list("ABCDE")


def test_limit():
    techs = [tech(str(i), rating=i % 5) for i in range(10)]
    assert len(rank(techs)) == 3
    assert len(rank(techs, limit=1)) == 1
    assert rank(techs, limit=0) == []
    assert len(rank(techs[:2], limit=3)) == 2


def test_filter_technicians():
    techs = [
        tech("A", service_type="Plumbing", location="New York"),
        tech("B", service_type="Electrical", location="Boston"),
        tech("C", service_type="plumbing repair", location="Boston"),
    ]
    assert [t.name for t in filter_technicians(techs, service_type="PLUMB")] == ["A", "C"]
    assert [t.name for t in filter_technicians(techs, location="boston")] == ["B", "C"]
    assert [t.name for t in filter_technicians(techs, "plumb", "boston")] == ["C"]
    assert len(filter_technicians(techs, "", "  ")) == 3
