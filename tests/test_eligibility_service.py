# tests/test_eligibility_service.py
# Unit tests for scheme eligibility checks, match scoring and ranking

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from app.models.scheme import EligibilityCriteria, Scheme
from app.models.student import StudentProfile
from app.services.eligibility_service import (
    REASON_ATTENDANCE,
    REASON_CGPA,
    REASON_COURSE,
    REASON_ELIGIBLE,
    REASON_MALFORMED,
    REASON_SEMESTER,
    SchemeMatcher,
)
from app.services.mongo_service import SCHEMES
from conftest import scheme_document


def make_scheme(name="Merit Scholarship", **criteria):
    defaults = {"min_cgpa": 6, "max_cgpa": 10, "min_attendance": 75, "courses": [], "semesters": []}
    defaults.update(criteria)
    return Scheme(
        name=name,
        description="Test scheme",
        type="Scholarship",
        department="Ministry of Education",
        eligibility_criteria=EligibilityCriteria(**defaults),
    )


@pytest.fixture
def matcher():
    return SchemeMatcher()


def test_eligible_student_scores_77(matcher):
    """cgpa 8 / attendance 90 on a 6-10 / 75 scheme: 15 + 12 + 25 + 25."""
    scheme = make_scheme()
    student = StudentProfile(cgpa=8, attendance=90)

    verdict = matcher.check_eligibility(scheme, student)
    assert verdict.eligible is True
    assert verdict.reason == REASON_ELIGIBLE
    assert matcher.calculate_match_score(scheme, student) == 77


def test_cgpa_below_range_is_rejected(matcher):
    verdict = matcher.check_eligibility(make_scheme(), StudentProfile(cgpa=5, attendance=90))
    assert verdict.eligible is False
    assert verdict.reason == REASON_CGPA


def test_cgpa_above_range_is_rejected(matcher):
    scheme = make_scheme(min_cgpa=4, max_cgpa=7)
    verdict = matcher.check_eligibility(scheme, StudentProfile(cgpa=8, attendance=90))
    assert verdict.reason == REASON_CGPA


def test_course_not_in_list_is_rejected(matcher):
    scheme = make_scheme(courses=["B.Tech CSE"])
    student = StudentProfile(cgpa=8, attendance=90, course="B.Tech ECE")

    verdict = matcher.check_eligibility(scheme, student)
    assert verdict.eligible is False
    assert verdict.reason == REASON_COURSE


def test_attendance_and_semester_reasons(matcher):
    assert matcher.check_eligibility(
        make_scheme(), StudentProfile(cgpa=8, attendance=60)
    ).reason == REASON_ATTENDANCE

    scheme = make_scheme(semesters=[5, 6])
    assert matcher.check_eligibility(
        scheme, StudentProfile(cgpa=8, attendance=90, semester=2)
    ).reason == REASON_SEMESTER


def test_first_failing_predicate_wins(matcher):
    scheme = make_scheme(courses=["B.Tech CSE"], semesters=[7])
    student = StudentProfile(cgpa=5, attendance=10, course="MBA", semester=1)
    assert matcher.check_eligibility(scheme, student).reason == REASON_CGPA


def test_empty_lists_accept_every_course_and_semester(matcher):
    for courses, semesters in (([], []), (None, None)):
        scheme = make_scheme(courses=courses, semesters=semesters)
        student = StudentProfile(cgpa=7, attendance=80, course="Anything", semester=9)
        assert matcher.check_eligibility(scheme, student).eligible is True


def test_score_components_at_bounds(matcher):
    scheme = make_scheme()

    at_min = matcher.score_breakdown(scheme, StudentProfile(cgpa=6, attendance=100))
    assert at_min.cgpa == 0
    assert at_min.attendance == 20

    at_max = matcher.score_breakdown(scheme, StudentProfile(cgpa=10, attendance=75))
    assert at_max.cgpa == 30
    assert at_max.attendance == 0


def test_score_rounds_half_up(matcher):
    """7.5 + 20 + 25 + 0 = 52.5, which rounds to 53 rather than banker's 52."""
    scheme = make_scheme(min_cgpa=2, max_cgpa=10, min_attendance=0, semesters=[5])
    student = StudentProfile(cgpa=4, attendance=100, semester=1)
    assert matcher.calculate_match_score(scheme, student) == 53


def test_zero_width_cgpa_range(matcher):
    scheme = make_scheme(min_cgpa=8, max_cgpa=8, min_attendance=75)

    exact = StudentProfile(cgpa=8, attendance=100)
    assert matcher.check_eligibility(scheme, exact).eligible is True
    assert matcher.score_breakdown(scheme, exact).cgpa == 30
    assert matcher.calculate_match_score(scheme, exact) == 100

    assert matcher.score_breakdown(scheme, StudentProfile(cgpa=7, attendance=100)).cgpa == 0


def test_malformed_criteria_are_never_eligible(matcher):
    scheme = make_scheme(min_cgpa=9, max_cgpa=5)
    student = StudentProfile(cgpa=7, attendance=90)

    verdict = matcher.check_eligibility(scheme, student)
    assert verdict.eligible is False
    assert verdict.reason == REASON_MALFORMED
    assert matcher.calculate_match_score(scheme, student) == 0
    assert matcher.rank_schemes([scheme], student) == []


def test_score_is_clamped_to_zero(matcher):
    scheme = make_scheme()
    assert matcher.calculate_match_score(scheme, StudentProfile(cgpa=0, attendance=0)) == 0


def test_higher_score_is_ranked_first(matcher):
    scheme_77 = make_scheme("Scheme 77")
    scheme_90 = make_scheme("Scheme 90", min_cgpa=4, min_attendance=50)
    student = StudentProfile(cgpa=8, attendance=90)

    ranked = matcher.rank_schemes([scheme_77, scheme_90], student)
    assert [m.scheme.name for m in ranked] == ["Scheme 90", "Scheme 77"]
    assert [m.match_score for m in ranked] == [90, 77]


def test_ties_keep_input_order(matcher):
    schemes = [make_scheme(name) for name in ("B", "A", "C")]
    ranked = matcher.rank_schemes(schemes, StudentProfile(cgpa=8, attendance=90))
    assert [m.scheme.name for m in ranked] == ["B", "A", "C"]


def test_explain_reports_verdict_score_and_breakdown(matcher):
    result = matcher.explain(make_scheme(), StudentProfile(cgpa=8, attendance=90))
    assert result["eligible"] is True
    assert result["match_score"] == 77
    assert result["breakdown"] == pytest.approx({"cgpa": 15, "attendance": 12, "course": 25, "semester": 25})


def test_recommendations_skip_inactive_expired_and_invalid(fake_mongo):
    now = datetime.now(timezone.utc)
    fake_mongo.seed(SCHEMES, **scheme_document("Open"))
    fake_mongo.seed(SCHEMES, **scheme_document("Inactive", is_active=False))
    fake_mongo.seed(SCHEMES, **scheme_document("Expired", application_end_date=now - timedelta(days=1)))
    fake_mongo.seed(SCHEMES, **scheme_document("Strict", eligibility_criteria={"min_cgpa": 9}))
    broken = scheme_document("Broken")
    del broken["description"]
    fake_mongo.seed(SCHEMES, **broken)

    matcher = SchemeMatcher(fake_mongo)
    student = StudentProfile(cgpa=8, attendance=90)

    fetched = asyncio.run(matcher.fetch_active_schemes())
    assert sorted(s.name for s in fetched) == ["Open", "Strict"]

    recommended = asyncio.run(matcher.get_recommended_schemes(student))
    assert [s.name for s in recommended] == ["Open"]
    assert all(matcher.check_eligibility(s, student).eligible for s in recommended)


def test_equal_scores_follow_deadline_then_name(fake_mongo):
    deadline = datetime.now(timezone.utc) + timedelta(days=10)
    fake_mongo.seed(SCHEMES, **scheme_document("Zeta", application_end_date=deadline))
    fake_mongo.seed(SCHEMES, **scheme_document("Alpha", application_end_date=deadline))
    fake_mongo.seed(SCHEMES, **scheme_document("Early", application_end_date=deadline - timedelta(days=5)))

    matches = asyncio.run(
        SchemeMatcher(fake_mongo).get_scheme_matches(StudentProfile(cgpa=8, attendance=90))
    )
    assert [m.scheme.name for m in matches] == ["Early", "Alpha", "Zeta"]


def test_fetch_without_repository_raises(matcher):
    with pytest.raises(RuntimeError):
        asyncio.run(matcher.fetch_active_schemes())
