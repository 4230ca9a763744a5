from django.contrib import admin
from .models import (
    ResultConfiguration, ResultPeriod, GradingScaleEntry, AssessmentComponent,
    Result, ComponentScore, ResultTemplate, ResultPublication
)


class ResultPeriodInline(admin.TabularInline):
    model = ResultPeriod
    extra = 0


class GradingScaleEntryInline(admin.TabularInline):
    model = GradingScaleEntry
    extra = 0


class AssessmentComponentInline(admin.TabularInline):
    model = AssessmentComponent
    extra = 0


@admin.register(ResultConfiguration)
class ResultConfigurationAdmin(admin.ModelAdmin):
    list_display = ("school", "academic_session", "cumulative_enabled", "cumulative_method", "ranking_policy")
    list_filter = ("school", "cumulative_method", "ranking_policy")
    inlines = [ResultPeriodInline, AssessmentComponentInline, GradingScaleEntryInline]


class ComponentScoreInline(admin.TabularInline):
    model = ComponentScore
    extra = 0
    readonly_fields = ("component", "score")
    can_delete = False


@admin.register(Result)
class ResultAdmin(admin.ModelAdmin):
    list_display = ("student", "subject", "period", "academic_session", "total", "grade", "published")
    list_filter = ("academic_session", "period", "published", "grade")
    search_fields = ("student__first_name", "student__last_name", "student__admission_number", "subject__name")
    readonly_fields = ("total", "grade", "remark", "cumulative_average", "published_at", "published_by")
    inlines = [ComponentScoreInline]


@admin.register(ResultTemplate)
class ResultTemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "level", "period", "is_default", "is_active", "updated_at")
    list_filter = ("school", "is_default", "is_active")
    search_fields = ("name",)


@admin.register(ResultPublication)
class ResultPublicationAdmin(admin.ModelAdmin):
    list_display = ("school", "academic_session", "period", "school_class", "published_by",
                    "total_results", "notifications_sent", "created_at")
    list_filter = ("school", "academic_session", "notifications_sent")
    readonly_fields = ("created_at",)
