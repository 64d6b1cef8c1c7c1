"""
Scheme matching: eligibility checks and match scoring of students against schemes
"""
import logging
import math
from datetime import datetime
from typing import List, Dict, Any, Optional, Iterable

from fastapi import Depends
from pydantic import ValidationError

from ..models.scheme import Scheme, EligibilityVerdict, ScoreBreakdown, MatchResult
from ..models.student import StudentProfile
from ..utils.documents import serialize_document
from .mongo_service import MongoService, get_mongo_service

logger = logging.getLogger(__name__)


REASON_ELIGIBLE = "All criteria met"
REASON_CGPA = "CGPA not in range"
REASON_ATTENDANCE = "Insufficient attendance"
REASON_COURSE = "Course not eligible"
REASON_SEMESTER = "Semester not eligible"
REASON_MALFORMED = "Invalid eligibility criteria"


class SchemeMatcher:
    """Matches student profiles against the catalog of active schemes"""

    CGPA_WEIGHT = 30
    ATTENDANCE_WEIGHT = 20
    COURSE_WEIGHT = 25
    SEMESTER_WEIGHT = 25

    # Attendance points saturate this many percentage points above the minimum
    ATTENDANCE_SATURATION = 25

    MAX_SCORE = 100

    def __init__(self, repository: Optional[MongoService] = None):
        self.repository = repository

    def check_eligibility(self, scheme: Scheme, student: StudentProfile) -> EligibilityVerdict:
        """
        Check a student against a scheme's criteria

        Predicates are evaluated in order (CGPA, attendance, course, semester)
        and the first failure determines the reason.

        Args:
            scheme: Scheme with embedded eligibility criteria
            student: Student profile to check

        Returns:
            EligibilityVerdict with the eligibility flag and reason
        """
        criteria = scheme.eligibility_criteria

        if not criteria.is_well_formed:
            logger.warning(
                f"Scheme '{scheme.name}' has min_cgpa {criteria.min_cgpa} > "
                f"max_cgpa {criteria.max_cgpa}; treating as ineligible"
            )
            return EligibilityVerdict(eligible=False, reason=REASON_MALFORMED)

        if student.cgpa < criteria.min_cgpa or student.cgpa > criteria.max_cgpa:
            return EligibilityVerdict(eligible=False, reason=REASON_CGPA)

        if student.attendance < criteria.min_attendance:
            return EligibilityVerdict(eligible=False, reason=REASON_ATTENDANCE)

        if not criteria.accepts_course(student.course):
            return EligibilityVerdict(eligible=False, reason=REASON_COURSE)

        if not criteria.accepts_semester(student.semester):
            return EligibilityVerdict(eligible=False, reason=REASON_SEMESTER)

        return EligibilityVerdict(eligible=True, reason=REASON_ELIGIBLE)

    def score_breakdown(self, scheme: Scheme, student: StudentProfile) -> ScoreBreakdown:
        """
        Compute the weighted sub-scores for a student/scheme pair

        A zero-width CGPA range awards full CGPA points only when the
        student's CGPA equals the single allowed value.
        """
        criteria = scheme.eligibility_criteria

        cgpa_range = criteria.max_cgpa - criteria.min_cgpa
        if cgpa_range == 0:
            cgpa_points = self.CGPA_WEIGHT if student.cgpa == criteria.min_cgpa else 0.0
        else:
            cgpa_points = (student.cgpa - criteria.min_cgpa) / cgpa_range * self.CGPA_WEIGHT

        attendance_ratio = min(
            (student.attendance - criteria.min_attendance) / self.ATTENDANCE_SATURATION, 1
        )
        attendance_points = attendance_ratio * self.ATTENDANCE_WEIGHT

        course_points = self.COURSE_WEIGHT if criteria.accepts_course(student.course) else 0
        semester_points = self.SEMESTER_WEIGHT if criteria.accepts_semester(student.semester) else 0

        return ScoreBreakdown(
            cgpa=cgpa_points,
            attendance=attendance_points,
            course=course_points,
            semester=semester_points
        )

    def calculate_match_score(self, scheme: Scheme, student: StudentProfile) -> int:
        """
        Weighted 0-100 match score

        Returns:
            Sum of sub-scores rounded half-up and clamped to [0, 100];
            0 for schemes with malformed criteria
        """
        if not scheme.eligibility_criteria.is_well_formed:
            logger.warning(f"Scheme '{scheme.name}' has malformed criteria; scoring as 0")
            return 0

        total = self.score_breakdown(scheme, student).total
        score = int(math.floor(total + 0.5))
        return max(0, min(score, self.MAX_SCORE))

    def rank_schemes(self, schemes: Iterable[Scheme], student: StudentProfile) -> List[MatchResult]:
        """
        Score the eligible schemes and order them by score, highest first

        Ties keep the order in which schemes were supplied.
        """
        matches = []
        for scheme in schemes:
            verdict = self.check_eligibility(scheme, student)
            if not verdict.eligible:
                continue
            matches.append(
                MatchResult(scheme=scheme, match_score=self.calculate_match_score(scheme, student))
            )

        # list.sort is stable, so equal scores preserve fetch order
        matches.sort(key=lambda match: match.match_score, reverse=True)
        return matches

    async def fetch_active_schemes(self, now: Optional[datetime] = None) -> List[Scheme]:
        """Load active, non-expired schemes, skipping documents that fail validation"""
        if self.repository is None:
            raise RuntimeError("SchemeMatcher has no repository to fetch schemes from")

        schemes = []
        for doc in await self.repository.get_active_schemes(now=now):
            try:
                schemes.append(Scheme.model_validate(serialize_document(doc)))
            except ValidationError as e:
                logger.warning(f"Skipping malformed scheme document {doc.get('_id')}: {e}")
        return schemes

    async def get_scheme_matches(
        self,
        student: StudentProfile,
        now: Optional[datetime] = None
    ) -> List[MatchResult]:
        """Ranked match results (scheme and score) for a student"""
        schemes = await self.fetch_active_schemes(now=now)
        matches = self.rank_schemes(schemes, student)
        logger.info(f"Scheme matching completed: {len(matches)}/{len(schemes)} active schemes eligible")
        return matches

    async def get_recommended_schemes(
        self,
        student: StudentProfile,
        now: Optional[datetime] = None
    ) -> List[Scheme]:
        """Eligible active schemes for a student, best match first"""
        matches = await self.get_scheme_matches(student, now=now)
        return [match.scheme for match in matches]

    def explain(self, scheme: Scheme, student: StudentProfile) -> Dict[str, Any]:
        """Verdict, score and breakdown for a single scheme"""
        verdict = self.check_eligibility(scheme, student)
        return {
            "scheme_id": scheme.id,
            "scheme_name": scheme.name,
            "eligible": verdict.eligible,
            "reason": verdict.reason,
            "match_score": self.calculate_match_score(scheme, student),
            "breakdown": self.score_breakdown(scheme, student).model_dump()
        }


def get_scheme_matcher(mongo: MongoService = Depends(get_mongo_service)) -> SchemeMatcher:
    """FastAPI dependency building a matcher over the MongoDB service"""
    return SchemeMatcher(mongo)
