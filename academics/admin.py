from django.contrib import admin
from .models import (
    SchoolClass, Subject, ClassSubject, ClassEnrollment, StudentAttendance
)


@admin.register(SchoolClass)
class SchoolClassAdmin(admin.ModelAdmin):
    list_display = ("name", "section", "level", "school", "form_teacher", "is_active")
    list_filter = ("school", "level", "is_active")
    search_fields = ("name",)


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ("name", "school", "code")
    list_filter = ("school",)
    search_fields = ("name", "code")


@admin.register(ClassSubject)
class ClassSubjectAdmin(admin.ModelAdmin):
    list_display = ("school_class", "subject", "teacher")
    list_filter = ("school_class",)
    autocomplete_fields = ("teacher",)


@admin.register(ClassEnrollment)
class ClassEnrollmentAdmin(admin.ModelAdmin):
    list_display = ("student", "school_class", "academic_session", "roll_number", "status")
    list_filter = ("school_class", "academic_session", "status")
    search_fields = ("student__first_name", "student__last_name", "student__admission_number")

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        user = request.user

        if not user.is_superuser and user.school:
            if db_field.name == "school_class":
                kwargs["queryset"] = SchoolClass.objects.filter(
                    school=user.school,
                    is_active=True
                )

        return super().formfield_for_foreignkey(db_field, request, **kwargs)


@admin.register(StudentAttendance)
class StudentAttendanceAdmin(admin.ModelAdmin):
    list_display = ("student", "academic_session", "period", "times_present", "times_school_opened")
    list_filter = ("academic_session", "period")
    search_fields = ("student__first_name", "student__last_name")
