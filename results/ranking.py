"""
Peer ranking within a class.

A student's class average is the sum of their published result totals for
a period divided by the number of those results. Students are sorted by
average (highest first, stable over enrollment order) and a ranking policy
turns the sorted list into positions.
"""
from collections import namedtuple

from django.conf import settings

from academics.models import ClassEnrollment
from .exceptions import InvalidConfigurationError
from .models import Result, ResultConfiguration

RankedStudent = namedtuple("RankedStudent", ["student_id", "average", "position"])
ClassPosition = namedtuple("ClassPosition", ["position", "students_in_class", "average", "ranking"])
SubjectPosition = namedtuple("SubjectPosition", ["position", "highest", "lowest", "average", "count"])


class SequentialRanking:
    """Every student gets a distinct position, even on equal averages."""
    name = ResultConfiguration.SEQUENTIAL

    def assign(self, ordered_scores):
        return [index + 1 for index, _ in enumerate(ordered_scores)]


class CompetitionRanking:
    """Equal scores share a position and the next position is skipped (1, 2, 2, 4)."""
    name = ResultConfiguration.COMPETITION

    def assign(self, ordered_scores):
        positions = []
        current_pos = 1
        last_score = None
        for index, score in enumerate(ordered_scores):
            if last_score is not None and score < last_score:
                current_pos = index + 1
            positions.append(current_pos)
            last_score = score
        return positions


RANKING_POLICIES = {
    SequentialRanking.name: SequentialRanking,
    CompetitionRanking.name: CompetitionRanking,
}


def get_ranking_policy(name=None):
    if name is None:
        name = getattr(settings, "RESULTS_DEFAULT_RANKING_POLICY", ResultConfiguration.COMPETITION)
    try:
        return RANKING_POLICIES[name]()
    except KeyError:
        raise InvalidConfigurationError(f"Unknown ranking policy '{name}'.")


def rank(scores, policy=None):
    """
    Rank ``scores``, a sequence of (key, score) pairs in insertion order.
    Returns RankedStudent tuples, best first.
    """
    policy = policy or get_ranking_policy()
    ordered = sorted(scores, key=lambda item: item[1], reverse=True)
    positions = policy.assign([score for _, score in ordered])
    return [
        RankedStudent(key, score, position)
        for (key, score), position in zip(ordered, positions)
    ]


def _enrolled_student_ids(school_class, academic_session):
    return list(
        ClassEnrollment.objects
        .filter(
            school_class=school_class,
            academic_session=academic_session,
            status=ClassEnrollment.ACTIVE,
        )
        .order_by("id")
        .values_list("student_id", flat=True)
    )


def _published_results(student_ids, academic_session, period):
    return (
        Result.objects
        .filter(
            student_id__in=student_ids,
            academic_session=academic_session,
            period=period,
            published=True,
        )
        .order_by("id")
    )


def class_averages(school_class, academic_session, period):
    """
    (student_id, average) pairs in enrollment order for students with at
    least one published result in the period.
    """
    student_ids = _enrolled_student_ids(school_class, academic_session)
    totals = {}
    for student_id, total in _published_results(student_ids, academic_session, period).values_list("student_id", "total"):
        running = totals.setdefault(student_id, [0.0, 0])
        running[0] += total
        running[1] += 1
    return [
        (student_id, totals[student_id][0] / totals[student_id][1])
        for student_id in student_ids
        if student_id in totals
    ]


def compute_class_position(school_class, academic_session, period, student, policy=None):
    """
    Position of ``student`` in the class for the period.

    ``students_in_class`` counts active enrollment rows, whether or not those
    students have published results. A student without published results
    has no position.
    """
    students_in_class = ClassEnrollment.objects.filter(
        school_class=school_class,
        academic_session=academic_session,
        status=ClassEnrollment.ACTIVE,
    ).count()
    ranking = rank(class_averages(school_class, academic_session, period), policy)

    student_id = getattr(student, "pk", student)
    for entry in ranking:
        if entry.student_id == student_id:
            return ClassPosition(entry.position, students_in_class, entry.average, ranking)
    return ClassPosition(None, students_in_class, None, ranking)


def compute_subject_positions(school_class, academic_session, period, student, policy=None):
    """
    {subject_id: SubjectPosition} for every subject the student has a
    published result in, ranked against classmates' totals in that subject.
    """
    student_id = getattr(student, "pk", student)
    student_ids = _enrolled_student_ids(school_class, academic_session)

    by_subject = {}
    for sid, subject_id, total in _published_results(student_ids, academic_session, period).values_list(
        "student_id", "subject_id", "total"
    ):
        by_subject.setdefault(subject_id, []).append((sid, total))

    positions = {}
    for subject_id, scores in by_subject.items():
        ranking = rank(scores, policy)
        mine = next((r for r in ranking if r.student_id == student_id), None)
        if mine is None:
            continue
        totals = [score for _, score in scores]
        positions[subject_id] = SubjectPosition(
            position=mine.position,
            highest=max(totals),
            lowest=min(totals),
            average=sum(totals) / len(totals),
            count=len(totals),
        )
    return positions


def class_statistics(school_class, academic_session, period):
    """
    Highest, lowest and mean class average for the period, plus the same
    figures over subject totals keyed by subject id.
    """
    averages = [avg for _, avg in class_averages(school_class, academic_session, period)]

    by_subject = {}
    student_ids = _enrolled_student_ids(school_class, academic_session)
    for subject_id, total in _published_results(student_ids, academic_session, period).values_list(
        "subject_id", "total"
    ):
        by_subject.setdefault(subject_id, []).append(total)
    subjects = {
        subject_id: {
            "highest": max(totals),
            "lowest": min(totals),
            "average": sum(totals) / len(totals),
            "count": len(totals),
        }
        for subject_id, totals in by_subject.items()
    }

    if not averages:
        return {
            "ranked_students": 0,
            "highest_average": 0,
            "lowest_average": 0,
            "class_average": 0,
            "subjects": subjects,
        }
    return {
        "ranked_students": len(averages),
        "highest_average": max(averages),
        "lowest_average": min(averages),
        "class_average": sum(averages) / len(averages),
        "subjects": subjects,
    }
