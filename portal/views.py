import json
import logging
from functools import wraps
from io import BytesIO

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.http import FileResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from academics.models import SchoolClass
from results.exceptions import InvalidSubmissionError, PermissionDeniedError, ResultError
from results.permissions import teaches_in_class
from results.ranking import class_statistics, compute_class_position, get_ranking_policy
from results.report import generate_report_card, preview_template
from results.services import (
    ResultSubmission, get_period, publish_results, submit_result, submit_results_batch, unpublish_results
)
from schools.models import AcademicSession, School
from students.models import Student

logger = logging.getLogger(__name__)


def json_errors(view):
    """Turn engine and lookup errors into JSON error responses."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except ResultError as e:
            return JsonResponse({'error': e.message}, status=e.status_code)
        except ObjectDoesNotExist as e:
            return JsonResponse({'error': str(e) or 'Not found'}, status=404)
        except ValidationError as e:
            return JsonResponse({'error': '; '.join(e.messages)}, status=400)
    return wrapper


def _json_body(request):
    try:
        return json.loads(request.body)
    except json.JSONDecodeError:
        raise InvalidSubmissionError('Invalid JSON')


def _school_filter(user):
    """Lookup kwargs limiting objects to the caller's school (none for super admins)."""
    return {} if user.is_super_admin else {'school': user.school}


def _int_param(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidSubmissionError(f'{name} must be an integer')


def _session_and_period(user, session_id, period_id):
    if not session_id or not period_id:
        raise InvalidSubmissionError('Missing session_id or period_id')
    session = AcademicSession.objects.get(id=_int_param(session_id, 'session_id'), **_school_filter(user))
    return session, get_period(_int_param(period_id, 'period_id'), session)


def serialize_result(result):
    return {
        'id': result.id,
        'student_id': result.student_id,
        'subject_id': result.subject_id,
        'period_id': result.period_id,
        'session_id': result.academic_session_id,
        'total': result.total,
        'grade': result.grade,
        'remark': result.remark,
        'cumulative_average': result.cumulative_average,
        'published': result.published,
        'component_scores': [
            {'component_id': cs.component_id, 'score': cs.score}
            for cs in result.component_scores.all()
        ],
    }


@login_required
@require_POST
@json_errors
def save_result(request):
    """Create or replace one result from its component scores."""
    submission = ResultSubmission.from_dict(_json_body(request))
    outcome = submit_result(request.user, submission)
    return JsonResponse({
        'success': True,
        'created': outcome.created,
        'result': serialize_result(outcome.result),
    }, status=201 if outcome.created else 200)


@login_required
@require_POST
@json_errors
def save_results_batch(request):
    data = _json_body(request)
    items = data.get('results') if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise InvalidSubmissionError('Expected a list of results')

    report = submit_results_batch(request.user, items)
    return JsonResponse({
        'success': not report.failures,
        **report.as_dict(),
        'message': f'Successfully saved {report.saved_count} of {len(items)} results',
    })


@login_required
@require_POST
@json_errors
def publish(request):
    """Publish (or, with action=unpublish, withdraw) results for a period."""
    data = _json_body(request)
    session, period = _session_and_period(request.user, data.get('session_id'), data.get('period_id'))
    school_class = None
    if data.get('class_id'):
        school_class = SchoolClass.objects.get(id=_int_param(data['class_id'], 'class_id'), school=session.school)

    if data.get('action', 'publish') == 'unpublish':
        count = unpublish_results(request.user, session, period, school_class)
        return JsonResponse({'success': True, 'unpublished_count': count})

    publication = publish_results(request.user, session, period, school_class)
    return JsonResponse({
        'success': True,
        'published_count': publication.total_results,
        'publication_id': publication.id,
    })


@login_required
@require_GET
@json_errors
def class_positions(request):
    """Class ranking for a period, from published results."""
    user = request.user
    session, period = _session_and_period(user, request.GET.get('session_id'), request.GET.get('period_id'))
    school_class = SchoolClass.objects.get(id=_int_param(request.GET.get('class_id'), 'class_id'), school=session.school)

    if not (user.is_admin_of(school_class.school) or teaches_in_class(user, school_class)):
        raise PermissionDeniedError('You are not assigned to this class.')

    policy = get_ranking_policy(period.configuration.ranking_policy)
    position = compute_class_position(school_class, session, period, None, policy)
    students = Student.objects.in_bulk([entry.student_id for entry in position.ranking])

    return JsonResponse({
        'class_id': school_class.id,
        'students_in_class': position.students_in_class,
        'ranking_policy': policy.name,
        'positions': [
            {
                'student_id': entry.student_id,
                'student_name': students[entry.student_id].full_name,
                'average': round(entry.average, 2),
                'position': entry.position,
            }
            for entry in position.ranking
        ],
        'statistics': class_statistics(school_class, session, period),
    })


@login_required
@require_GET
@json_errors
def student_report_card(request, student_id):
    """Download a student's report card PDF."""
    user = request.user
    student = get_object_or_404(Student, id=student_id, **_school_filter(user))
    session, period = _session_and_period(user, request.GET.get('session_id'), request.GET.get('period_id'))

    report = generate_report_card(user, student, session, period)
    response = FileResponse(BytesIO(report.content), as_attachment=True, filename=report.filename,
                            content_type='application/pdf')
    response['X-Report-Fallback'] = 'true' if report.used_fallback else 'false'
    return response


@login_required
@require_POST
@json_errors
def template_preview(request):
    """Render an editor document with sample data."""
    user = request.user
    data = _json_body(request)
    template = data.get('template') if isinstance(data, dict) else None
    if not isinstance(template, dict):
        raise InvalidSubmissionError('Invalid template structure')

    school_id = data.get('school_id') or user.school_id
    school = School.objects.get(id=_int_param(school_id, 'school_id'))
    if not user.is_admin_of(school):
        raise PermissionDeniedError('Only school administrators can preview templates.')

    outcome = preview_template(school, template)
    if not outcome.ok:
        return JsonResponse({'error': outcome.error.message}, status=400)
    return FileResponse(BytesIO(outcome.content), filename='preview.pdf', content_type='application/pdf')
