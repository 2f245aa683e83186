"""Tests for dashboard aggregates."""

import pytest

from conftest import make_teacher
from analytics import filter_by_category, rank_by_quality, system_health, teachers_at_risk
from models import RiskLevel, TeacherCategory, TeacherStats


@pytest.fixture
def teachers():
    return [
        make_teacher("s1", "School Teacher", TeacherCategory.SCHOOL),
        make_teacher("u1", "Uni Teacher", TeacherCategory.UNIVERSITY),
        make_teacher("p1", "Pro Teacher", TeacherCategory.PROFESSIONAL),
    ]


@pytest.fixture
def stats():
    return [
        TeacherStats(teacher_id="s1", average_rating=8.123, quality_score=7.456, total_reviews=4),
        TeacherStats(teacher_id="u1", average_rating=3.0, quality_score=3.2, total_reviews=2,
                     risk_level=RiskLevel.HIGH),
        TeacherStats(teacher_id="p1", average_rating=6.0, quality_score=5.5, total_reviews=0,
                     risk_level=RiskLevel.MEDIUM),
    ]


def test_system_health(stats):
    health = system_health(stats)
    assert health.average_quality == pytest.approx((7.456 + 3.2 + 5.5) / 3)
    assert health.total_reviews == 6
    assert health.high_risk_count == 1


def test_system_health_empty():
    health = system_health([])
    assert health.average_quality == 0
    assert health.total_reviews == 0
    assert health.high_risk_count == 0


@pytest.mark.parametrize("category,expected", [
    (None, ["s1", "u1", "p1"]),
    ("All", ["s1", "u1", "p1"]),
    ("School", ["s1"]),
    (TeacherCategory.PROFESSIONAL, ["p1"]),
])
def test_filter_by_category(stats, teachers, category, expected):
    assert [s.teacher_id for s in filter_by_category(stats, teachers, category)] == expected


def test_filter_rejects_unknown_category(stats, teachers):
    with pytest.raises(ValueError):
        filter_by_category(stats, teachers, "Kindergarten")


def test_filter_drops_stats_without_teacher(stats, teachers):
    orphan = TeacherStats(teacher_id="ghost")
    assert filter_by_category(stats + [orphan], teachers, "School") == [stats[0]]


def test_rank_by_quality(stats, teachers):
    rows = rank_by_quality(stats + [TeacherStats(teacher_id="ghost", quality_score=9.0)], teachers)

    assert [r.teacher_id for r in rows] == ["ghost", "s1", "p1", "u1"]
    assert rows[0].name == "Unknown"
    assert rows[1].score == 7.46
    assert rows[1].rating == 8.12


def test_teachers_at_risk(stats):
    assert [s.teacher_id for s in teachers_at_risk(stats)] == ["u1"]
    assert [s.teacher_id for s in teachers_at_risk(stats, RiskLevel.MEDIUM)] == ["p1"]
