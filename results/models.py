from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from schools.models import School, AcademicSession, SchoolLevel


def default_progressive_weights():
    return list(getattr(settings, "RESULTS_PROGRESSIVE_WEIGHTS", [30, 30, 40]))


# -------------------------
# Result Configuration (per school + session)
# -------------------------
class ResultConfiguration(models.Model):
    SIMPLE_AVERAGE = "simple_average"
    WEIGHTED_AVERAGE = "weighted_average"
    PROGRESSIVE_AVERAGE = "progressive_average"
    CUMULATIVE_METHOD_CHOICES = (
        (SIMPLE_AVERAGE, "Simple average"),
        (WEIGHTED_AVERAGE, "Weighted average"),
        (PROGRESSIVE_AVERAGE, "Progressive (term-weighted) average"),
    )

    COMPETITION = "competition"
    SEQUENTIAL = "sequential"
    RANKING_POLICY_CHOICES = (
        (COMPETITION, "Ties share a position (1, 2, 2, 4)"),
        (SEQUENTIAL, "Distinct positions (1, 2, 3, 4)"),
    )

    school = models.ForeignKey(
        School,
        on_delete=models.CASCADE,
        related_name="result_configurations"
    )
    academic_session = models.ForeignKey(
        AcademicSession,
        on_delete=models.CASCADE,
        related_name="result_configurations"
    )
    cumulative_enabled = models.BooleanField(default=False)
    cumulative_method = models.CharField(
        max_length=30,
        choices=CUMULATIVE_METHOD_CHOICES,
        default=SIMPLE_AVERAGE
    )
    progressive_weights = models.JSONField(
        default=default_progressive_weights,
        blank=True,
        help_text="Weight of each period by its order, e.g. [30, 30, 40]"
    )
    ranking_policy = models.CharField(
        max_length=20,
        choices=RANKING_POLICY_CHOICES,
        default=COMPETITION
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("school", "academic_session")

    def clean(self):
        if self.academic_session_id and self.academic_session.school_id != self.school_id:
            raise ValidationError("Academic session must belong to the configured school.")
        weights = self.progressive_weights or []
        if not isinstance(weights, list) or any(
            isinstance(w, bool) or not isinstance(w, (int, float)) or w < 0 for w in weights
        ):
            raise ValidationError({"progressive_weights": "Weights must be a list of non-negative numbers."})

    def __str__(self):
        return f"{self.school.name} | {self.academic_session.name}"


# -------------------------
# Result Period (term)
# -------------------------
class ResultPeriod(models.Model):
    configuration = models.ForeignKey(
        ResultConfiguration,
        on_delete=models.CASCADE,
        related_name="periods"
    )
    name = models.CharField(max_length=50)  # e.g., First Term
    order = models.PositiveIntegerField(default=1, help_text="Position of the period in the session, starting at 1")
    weight = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text="Used by the weighted cumulative method; empty means 1"
    )

    class Meta:
        unique_together = ("configuration", "name")
        ordering = ["order", "id"]

    @property
    def effective_weight(self):
        return 1.0 if self.weight is None else self.weight

    def __str__(self):
        return f"{self.name} ({self.configuration.academic_session.name})"


# -------------------------
# Grading Scale
# -------------------------
class GradingScaleEntry(models.Model):
    configuration = models.ForeignKey(
        ResultConfiguration,
        on_delete=models.CASCADE,
        related_name="grading_scale"
    )
    min_score = models.FloatField()
    max_score = models.FloatField()
    grade = models.CharField(max_length=5)
    remark = models.CharField(max_length=50, blank=True)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "-max_score"]
        verbose_name_plural = "Grading scale entries"

    def clean(self):
        if self.min_score > self.max_score:
            raise ValidationError("Minimum score cannot be greater than maximum score.")
        if not self.configuration_id:
            return
        overlapping = (
            GradingScaleEntry.objects
            .filter(
                configuration_id=self.configuration_id,
                min_score__lte=self.max_score,
                max_score__gte=self.min_score,
            )
            .exclude(pk=self.pk)
        )
        if overlapping.exists():
            other = overlapping.first()
            raise ValidationError(
                f"Range {self.min_score:g}-{self.max_score:g} overlaps grade "
                f"{other.grade} ({other.min_score:g}-{other.max_score:g})."
            )

    def __str__(self):
        return f"{self.grade}: {self.min_score:g}-{self.max_score:g} ({self.remark})"


# -------------------------
# Assessment Component
# -------------------------
class AssessmentComponent(models.Model):
    configuration = models.ForeignKey(
        ResultConfiguration,
        on_delete=models.CASCADE,
        related_name="components"
    )
    name = models.CharField(max_length=50)  # e.g., CA1, Exam
    max_score = models.FloatField(validators=[MinValueValidator(0)])
    order = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = ("configuration", "name")
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.name} (/{self.max_score:g})"


# -------------------------
# Result (per student, subject, period, session)
# -------------------------
class Result(models.Model):
    student = models.ForeignKey(
        "students.Student",
        on_delete=models.CASCADE,
        related_name="results"
    )
    subject = models.ForeignKey(
        "academics.Subject",
        on_delete=models.CASCADE,
        related_name="results"
    )
    period = models.ForeignKey(
        ResultPeriod,
        on_delete=models.CASCADE,
        related_name="results"
    )
    academic_session = models.ForeignKey(
        AcademicSession,
        on_delete=models.CASCADE,
        related_name="results"
    )

    # Computed fields, always written together
    total = models.FloatField(default=0, editable=False)
    grade = models.CharField(max_length=5, blank=True, editable=False)
    remark = models.CharField(max_length=50, blank=True, editable=False)
    cumulative_average = models.FloatField(default=0, editable=False)

    published = models.BooleanField(default=False)
    published_at = models.DateTimeField(null=True, blank=True)
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+"
    )

    affective_traits = models.JSONField(default=dict, blank=True)
    psychomotor_skills = models.JSONField(default=dict, blank=True)
    custom_fields = models.JSONField(default=dict, blank=True)
    teacher_comment = models.TextField(blank=True)
    admin_comment = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["student", "subject", "period", "academic_session"],
                name="one_result_per_student_subject_period",
            )
        ]
        ordering = ["subject__name"]

    def __str__(self):
        return f"{self.student} - {self.subject.name} ({self.period.name}): {self.total:g} {self.grade}"


class ComponentScore(models.Model):
    result = models.ForeignKey(
        Result,
        on_delete=models.CASCADE,
        related_name="component_scores"
    )
    component = models.ForeignKey(
        AssessmentComponent,
        on_delete=models.CASCADE,
        related_name="scores"
    )
    score = models.FloatField(validators=[MinValueValidator(0)])

    class Meta:
        unique_together = ("result", "component")
        ordering = ["component__order", "component__id"]

    def __str__(self):
        return f"{self.component.name}: {self.score:g}"


# -------------------------
# Report Template
# -------------------------
class ResultTemplate(models.Model):
    """
    A report card layout authored in the template editor. ``content`` holds
    the editor document: {"canvasSize": {...}, "elements": [...]}.
    """
    school = models.ForeignKey(
        School,
        on_delete=models.CASCADE,
        related_name="result_templates"
    )
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    level = models.ForeignKey(
        SchoolLevel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="result_templates"
    )
    period = models.ForeignKey(
        ResultPeriod,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="result_templates"
    )
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    content = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]

    @property
    def canvas_size(self):
        size = (self.content or {}).get("canvasSize") or {}
        return size.get("width", 794), size.get("height", 1123)

    def __str__(self):
        return f"{self.name} ({self.school.name})"


# -------------------------
# Publication record
# -------------------------
class ResultPublication(models.Model):
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="result_publications")
    academic_session = models.ForeignKey(AcademicSession, on_delete=models.CASCADE)
    period = models.ForeignKey(ResultPeriod, on_delete=models.CASCADE)
    school_class = models.ForeignKey(
        "academics.SchoolClass",
        on_delete=models.SET_NULL,
        null=True,
        blank=True
    )
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+"
    )
    total_results = models.PositiveIntegerField(default=0)
    notifications_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.school.name} | {self.period.name} ({self.total_results} results)"
