"""
Errors raised by the result engine.

Every error carries the HTTP status the portal answers with, so views can
turn any ``ResultError`` into a JSON error response without a lookup table.
"""
from django.core.exceptions import PermissionDenied


class ResultError(Exception):
    status_code = 400
    default_message = "Result processing failed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NoMatchingGradeError(ResultError):
    """A total fell outside every range of the grading scale."""
    default_message = "Total does not match any grading scale entry."

    def __init__(self, total=None, message=None):
        self.total = total
        if message is None and total is not None:
            message = f"Total {total:g} does not match any grading scale entry. Check the grading scale configuration."
        super().__init__(message)


class ConfigurationNotFoundError(ResultError):
    status_code = 404
    default_message = "No result configuration exists for this academic session."


class PeriodNotFoundError(ConfigurationNotFoundError):
    default_message = "Result period not found for this academic session."


class InvalidConfigurationError(ResultError):
    default_message = "Result configuration is invalid."


class InvalidSubmissionError(ResultError):
    default_message = "Result submission is invalid."


class PermissionDeniedError(ResultError, PermissionDenied):
    status_code = 403
    default_message = "You are not allowed to manage results for this class or subject."


class NoPublishedResultsError(ResultError):
    status_code = 404
    default_message = "No published results found for this student, session and period."


class NothingToPublishError(ResultError):
    default_message = "No unpublished results found for the selected criteria."


class TemplateRenderError(ResultError):
    """
    Raised while drawing a user-authored template. Never reaches callers:
    the report renderer switches to its built-in layout instead.
    """
    status_code = 500
    default_message = "Report template could not be rendered."

    def __init__(self, message=None, element=None):
        self.element = element
        super().__init__(message)
