from django.contrib import admin
from academics.models import ClassSubject
from .models import TeacherProfile


class SubjectAssignmentInline(admin.TabularInline):
    """The class subjects this teacher may enter results for."""
    model = ClassSubject
    fk_name = "teacher"
    fields = ("school_class", "subject")
    extra = 0


@admin.register(TeacherProfile)
class TeacherProfileAdmin(admin.ModelAdmin):
    list_display = ("staff_id", "full_name", "school", "assignment_count")
    list_filter = ("school",)
    search_fields = ("staff_id", "user__username", "user__first_name", "user__last_name")
    autocomplete_fields = ("user", "school")
    inlines = [SubjectAssignmentInline]

    def assignment_count(self, obj):
        return obj.class_subjects.count()
    assignment_count.short_description = "Subjects"
