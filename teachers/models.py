from django.db import models
from accounts.models import User
from schools.models import School


class TeacherProfile(models.Model):
    """A teacher's staff record; result entry rights come from its class assignments."""
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name="teacher_profile",
        limit_choices_to={'role': 'TEACHER'}
    )
    school = models.ForeignKey(School, on_delete=models.CASCADE, related_name="teachers")
    staff_id = models.CharField(max_length=50, unique=True)
    middle_name = models.CharField(max_length=50, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True)
    signature = models.ImageField(upload_to="teacher_signatures/", blank=True, null=True)

    class Meta:
        ordering = ["staff_id"]

    @property
    def full_name(self):
        parts = [self.user.first_name, self.middle_name, self.user.last_name]
        return " ".join(p for p in parts if p) or self.user.username

    def teaches(self, school_class, subject=None):
        """
        Form teacher of ``school_class``, or assigned to ``subject`` in it
        (to any subject when ``subject`` is None).
        """
        if self.school_id != school_class.school_id:
            return False
        if school_class.form_teacher_id == self.pk:
            return True
        assignments = self.class_subjects.filter(school_class=school_class)
        if subject is not None:
            assignments = assignments.filter(subject=subject)
        return assignments.exists()

    def __str__(self):
        return self.full_name
