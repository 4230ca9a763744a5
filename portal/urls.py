from django.urls import path
from . import views

app_name = "portal"

urlpatterns = [
    # Result entry
    path("results/save/", views.save_result, name="save_result"),
    path("results/batch/", views.save_results_batch, name="save_results_batch"),
    path("results/publish/", views.publish, name="publish_results"),
    path("results/positions/", views.class_positions, name="class_positions"),

    # Report cards
    path("students/<int:student_id>/report-card/", views.student_report_card, name="student_report_card"),
    path("templates/preview/", views.template_preview, name="template_preview"),
]
