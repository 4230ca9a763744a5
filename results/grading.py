from .exceptions import NoMatchingGradeError


def resolve_grade(total, scale):
    """
    Return the first grading scale entry whose inclusive range contains
    ``total``.

    ``scale`` is any ordered iterable of objects with ``min_score`` and
    ``max_score`` attributes (usually GradingScaleEntry rows). Raises
    NoMatchingGradeError when nothing matches, including for an empty scale.
    """
    for entry in scale:
        if entry.min_score <= total <= entry.max_score:
            return entry
    raise NoMatchingGradeError(total)
