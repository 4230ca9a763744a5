from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from students.models import Student
from .models import User


class WardInline(admin.TabularInline):
    """Students whose report cards a parent account may download."""
    model = Student.guardians.through
    fk_name = "user"
    extra = 0
    verbose_name = "ward"
    verbose_name_plural = "wards"


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "get_full_name", "role", "school", "is_active")
    search_fields = ("username", "email", "first_name", "last_name")
    list_filter = ("role", "school", "is_active")
    autocomplete_fields = ("school",)
    inlines = [WardInline]

    fieldsets = BaseUserAdmin.fieldsets + (
        ("School access", {"fields": ("role", "school")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("School access", {"fields": ("role", "school")}),
    )
