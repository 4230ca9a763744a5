"""
Everything a report card layout can show, flattened into plain values.

The orchestrator builds one of these from the database; the template
preview builds one from sample values. Renderers never touch the ORM.
"""


class RenderData:

    def __init__(
        self,
        student,
        school,
        class_info,
        session_name,
        period_name,
        subjects,
        component_names,
        grading_scale,
        summary,
        cumulative=None,
        attendance=None,
        comments=None,
        affective_traits=None,
        psychomotor_skills=None,
        custom_fields=None,
    ):
        """
        student: dict with name, admission_number, gender, date_of_birth,
            age, photo_path
        school: dict with name, address, motto, phone, email, website,
            logo_path, stamp_path, primary_color
        class_info: dict with name, section, teacher
        subjects: list of dicts with subject, total, grade, remark,
            components [(name, score)], cumulative_average, position, highest
        grading_scale: list of dicts with grade, min_score, max_score, remark
        summary: dict with total_score, total_obtainable, average,
            overall_grade, position, students_in_class
        cumulative: dict with previous_total, term_count, average
        attendance: dict with days_present, days_absent, total_days,
            percentage
        comments: dict with teacher and admin
        """
        self.student = student
        self.school = school
        self.class_info = class_info or {}
        self.session_name = session_name
        self.period_name = period_name
        self.subjects = subjects
        self.component_names = component_names
        self.grading_scale = grading_scale
        self.summary = summary
        self.cumulative = cumulative or {}
        self.attendance = attendance or {}
        self.comments = comments or {}
        self.affective_traits = affective_traits or {}
        self.psychomotor_skills = psychomotor_skills or {}
        self.custom_fields = custom_fields or {}

    @classmethod
    def sample(cls, school=None):
        """Representative values for previewing a template."""
        school = school or {}
        subjects = [
            {
                "subject": "Mathematics", "total": 88, "grade": "A", "remark": "Excellent",
                "components": [("CA1", 15), ("CA2", 13), ("Exam", 60)],
                "cumulative_average": 86.5, "position": 2, "highest": 94,
            },
            {
                "subject": "English Language", "total": 75, "grade": "B", "remark": "Very Good",
                "components": [("CA1", 12), ("CA2", 13), ("Exam", 50)],
                "cumulative_average": 73.5, "position": 5, "highest": 89,
            },
            {
                "subject": "Basic Science", "total": 92, "grade": "A", "remark": "Excellent",
                "components": [("CA1", 14), ("CA2", 15), ("Exam", 63)],
                "cumulative_average": 90.0, "position": 1, "highest": 92,
            },
        ]
        total = sum(row["total"] for row in subjects)
        return cls(
            student={
                "name": "John Doe",
                "admission_number": "ADM/2025/001",
                "gender": "Male",
                "date_of_birth": "15th March, 2012",
                "age": 13,
                "photo_path": None,
            },
            school={
                "name": school.get("name") or "Sample School",
                "address": school.get("address") or "",
                "motto": school.get("motto") or "",
                "phone": school.get("phone") or "",
                "email": school.get("email") or "",
                "website": school.get("website") or "",
                "logo_path": school.get("logo_path"),
                "stamp_path": school.get("stamp_path"),
                "primary_color": school.get("primary_color") or "#000080",
            },
            class_info={"name": "JSS 2", "section": "A", "teacher": "Mrs. Johnson"},
            session_name="2025/2026",
            period_name="First Term",
            subjects=subjects,
            component_names=["CA1", "CA2", "Exam"],
            grading_scale=[
                {"grade": "A", "min_score": 70, "max_score": 100, "remark": "Excellent"},
                {"grade": "B", "min_score": 60, "max_score": 69.99, "remark": "Very Good"},
                {"grade": "C", "min_score": 50, "max_score": 59.99, "remark": "Credit"},
                {"grade": "D", "min_score": 40, "max_score": 49.99, "remark": "Pass"},
                {"grade": "F", "min_score": 0, "max_score": 39.99, "remark": "Fail"},
            ],
            summary={
                "total_score": total,
                "total_obtainable": 100 * len(subjects),
                "average": round(total / len(subjects), 2),
                "overall_grade": "A",
                "position": 2,
                "students_in_class": 25,
            },
            cumulative={"previous_total": 742, "term_count": 1, "average": 84.5},
            attendance={"days_present": 85, "days_absent": 17, "total_days": 102, "percentage": 83.3},
            comments={"teacher": "A very promising child.", "admin": "Excellent performance."},
            affective_traits={"Punctuality": "5", "Neatness": "4", "Politeness": "5", "Honesty": "4"},
            psychomotor_skills={"Handwriting": "4", "Games/Sports": "5", "Drawing": "3"},
            custom_fields={"result_status": "Promoted", "next_term_date": "10th January, 2026"},
        )
