from django.db import models
from django.db.models import Q


class School(models.Model):
    """
    Root entity. Every other domain object must belong to a School.
    Branding fields feed the report card header.
    """
    name = models.CharField(max_length=255, unique=True)
    address = models.TextField(blank=True)
    motto = models.CharField(max_length=255, blank=True, null=True)
    phone = models.CharField(max_length=30, blank=True)
    email = models.EmailField(blank=True)
    website = models.CharField(max_length=200, blank=True)
    primary_color = models.CharField(max_length=7, default="#000080", help_text="Hex colour used on report cards")
    logo = models.ImageField(upload_to="school_logos/", blank=True, null=True)
    principal_signature = models.ImageField(upload_to="school_signatures/", blank=True, null=True, help_text="Principal's signature")
    stamp = models.ImageField(upload_to="school_stamps/", blank=True, null=True, help_text="School Official Stamp")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class AcademicSession(models.Model):
    """
    Academic session (e.g. 2024/2025)
    Enforced: only one active session per school
    """
    school = models.ForeignKey(
        School,
        on_delete=models.CASCADE,
        related_name="academic_sessions"
    )
    name = models.CharField(max_length=20)
    is_active = models.BooleanField(default=False)

    class Meta:
        unique_together = ("school", "name")
        constraints = [
            models.UniqueConstraint(
                fields=["school"],
                condition=Q(is_active=True),
                name="one_active_session_per_school",
            )
        ]
        ordering = ["-name"]

    def __str__(self) -> str:
        return f"{self.school} | {self.name}"


class SchoolLevel(models.Model):
    """
    Class level (e.g. Primary, Junior Secondary). Report templates can
    target a level.
    """
    school = models.ForeignKey(
        School,
        on_delete=models.CASCADE,
        related_name="levels"
    )
    name = models.CharField(max_length=100)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = ("school", "name")
        ordering = ["order", "name"]

    def __str__(self) -> str:
        return f"{self.school} | {self.name}"
