from django.contrib import admin
from .models import School, AcademicSession, SchoolLevel

@admin.register(School)
class SchoolAdmin(admin.ModelAdmin):
    list_display = ("name", "get_is_active", "created_at")
    search_fields = ("name",)
    list_filter = ("is_active",)

    def get_is_active(self, obj):
        return obj.is_active
    get_is_active.short_description = "Active"

@admin.register(AcademicSession)
class AcademicSessionAdmin(admin.ModelAdmin):
    list_display = ("name", "get_school", "is_active")
    search_fields = ("name",)
    autocomplete_fields = ("school",)

    def get_school(self, obj):
        return obj.school.name
    get_school.short_description = "School"

@admin.register(SchoolLevel)
class SchoolLevelAdmin(admin.ModelAdmin):
    list_display = ("name", "get_school", "order")
    search_fields = ("name",)
    autocomplete_fields = ("school",)

    def get_school(self, obj):
        return obj.school.name
    get_school.short_description = "School"
