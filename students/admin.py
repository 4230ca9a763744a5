# students/admin.py

from django.contrib import admin
from academics.models import ClassEnrollment
from .models import Student


class EnrollmentInline(admin.TabularInline):
    model = ClassEnrollment
    fields = ("academic_session", "school_class", "roll_number", "status")
    extra = 0


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("admission_number", "full_name", "school", "gender", "has_login", "is_active")
    list_filter = ("school", "gender", "is_active")
    search_fields = ("admission_number", "first_name", "last_name")
    filter_horizontal = ("guardians",)
    readonly_fields = ("user",)
    ordering = ("school", "last_name")
    inlines = [EnrollmentInline]

    def has_login(self, obj):
        return obj.user_id is not None
    has_login.boolean = True
    has_login.short_description = "Login"
