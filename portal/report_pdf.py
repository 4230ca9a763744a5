"""
PDF rendering for student report cards.

Two stages:

- render_template draws a template authored in the drag-and-drop editor
  onto a reportlab canvas. Any problem with the template comes back as a
  TemplateRenderError inside a TemplateRenderOutcome instead of raising.
- render_fallback lays out a fixed report sheet with platypus. It only
  depends on RenderData, so it is used whenever there is no template or the
  template could not be drawn.

Editor coordinates are pixels on a 794px-wide page with the origin at the
top left; they are scaled to A4 points and flipped to reportlab's
bottom-left origin.
"""
import logging
from collections import namedtuple
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from django.conf import settings
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.flowables import HRFlowable

from results.exceptions import TemplateRenderError
from .dynamic_fields import (
    format_number, format_percentage, format_position, grading_scale_lines,
    resolve_field, resolve_image,
)

logger = logging.getLogger(__name__)

# Template width 794px -> A4 width 595.28pt
SCALE = 0.75
DEFAULT_CANVAS = (794, 1123)

RenderedReport = namedtuple("RenderedReport", ["content", "used_fallback", "error"])


class TemplateRenderOutcome:
    """Result of drawing a template: PDF bytes, or the error that stopped it."""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error

    @property
    def ok(self):
        return self.error is None and bool(self.content)


# -------------------------
# Helpers
# -------------------------
def _color(value, element=None):
    if value is None or value == "" or value == "transparent":
        return None
    if not isinstance(value, str):
        raise TemplateRenderError(f"Invalid colour {value!r}.", element)
    try:
        return colors.toColor(value)
    except ValueError:
        raise TemplateRenderError(f"Invalid colour {value!r}.", element)


def _number(value, name, element):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TemplateRenderError(f"Element {name} must be a number, got {value!r}.", element)
    return float(value)


def _geometry(element):
    x = _number(element.get("x", 0), "x", element)
    y = _number(element.get("y", 0), "y", element)
    width = _number(element.get("width", 0), "width", element)
    height = _number(element.get("height", 0), "height", element)
    if width < 0 or height < 0:
        raise TemplateRenderError("Element width and height cannot be negative.", element)
    return x * SCALE, y * SCALE, width * SCALE, height * SCALE


def _font(style):
    bold = style.get("fontWeight") == "bold"
    italic = style.get("fontStyle") == "italic"
    if bold and italic:
        return "Helvetica-BoldOblique"
    if bold:
        return "Helvetica-Bold"
    if italic:
        return "Helvetica-Oblique"
    return "Helvetica"


def _font_size(style, element, default=12):
    return _number(style.get("fontSize", default), "fontSize", element) * SCALE


def template_content(template):
    """The editor document of a ResultTemplate, or of a raw dict."""
    content = getattr(template, "content", template)
    if isinstance(content, dict) and "elements" not in content and isinstance(content.get("content"), dict):
        content = content["content"]
    if not isinstance(content, dict) or not isinstance(content.get("elements"), list):
        raise TemplateRenderError("Template has no element list.")
    return content


def template_pagesize(content):
    size = content.get("canvasSize") or {}
    width = size.get("width", DEFAULT_CANVAS[0])
    height = size.get("height", DEFAULT_CANVAS[1])
    return landscape(A4) if width > height else A4


# -------------------------
# Template drawing
# -------------------------
class TemplateCanvas:
    """Draws editor elements onto a reportlab canvas."""

    def __init__(self, canvas, page_height, data):
        self.canvas = canvas
        self.page_height = page_height
        self.data = data

    def top(self, y):
        return self.page_height - y

    def draw(self, element):
        kind = element.get("type")
        style = element.get("style") or {}
        metadata = element.get("metadata") or {}
        x, y, width, height = _geometry(element)

        if kind in ("shape", "line"):
            self.draw_shape(element, x, y, width, height, style)
        elif kind == "text":
            self.draw_text(element.get("content") or "", x, y, width, style, element)
        elif kind == "dynamic":
            self.draw_dynamic(element, x, y, width, style, metadata)
        elif kind == "image":
            self.draw_image(element, x, y, width, height, metadata)
        elif kind == "table":
            self.draw_table(element, x, y, width, height, style, metadata)
        else:
            logger.warning("Skipping template element of unknown type %r", kind)

    def draw_shape(self, element, x, y, width, height, style):
        c = self.canvas
        c.saveState()
        background = _color(style.get("backgroundColor"), element)
        if background is not None:
            c.setFillColor(background)
            c.rect(x, self.top(y + height), width, height, stroke=0, fill=1)

        border_color = _color(style.get("borderColor"), element)
        if border_color is not None and style.get("borderWidth"):
            c.setStrokeColor(border_color)
            c.setLineWidth(_number(style["borderWidth"], "borderWidth", element))
            c.rect(x, self.top(y + height), width, height, stroke=1, fill=0)
        elif style.get("borderBottom"):
            # e.g. "2px solid #000000"
            parts = str(style["borderBottom"]).split()
            try:
                line_width = float(parts[0].rstrip("px")) if parts else 1
            except ValueError:
                raise TemplateRenderError(f"Invalid borderBottom {style['borderBottom']!r}.", element)
            c.setLineWidth(line_width or 1)
            c.setStrokeColor(_color(parts[2], element) if len(parts) > 2 else colors.black)
            c.line(x, self.top(y + height), x + width, self.top(y + height))
        c.restoreState()

    def draw_text(self, text, x, y, width, style, element):
        if not text:
            return
        c = self.canvas
        font = _font(style)
        size = _font_size(style, element)
        align = style.get("textAlign", "left")

        lines = []
        for paragraph in str(text).split("\n"):
            lines.extend(simpleSplit(paragraph, font, size, width) if width else [paragraph])

        c.saveState()
        c.setFont(font, size)
        c.setFillColor(_color(style.get("color"), element) or colors.black)
        baseline = self.top(y) - size
        for line in lines:
            if align == "center":
                c.drawCentredString(x + width / 2, baseline, line)
            elif align == "right":
                c.drawRightString(x + width, baseline, line)
            else:
                c.drawString(x, baseline, line)
            baseline -= size * 1.2
        c.restoreState()

    def draw_dynamic(self, element, x, y, width, style, metadata):
        field = metadata.get("field")
        if not field:
            raise TemplateRenderError("Dynamic element has no field.", element)
        if field == "grading_scale" and metadata.get("displayType") == "list":
            text = "\n".join(grading_scale_lines(self.data))
        else:
            text = resolve_field(field, self.data)
        self.draw_text(text, x, y, width, style, element)

    def draw_image(self, element, x, y, width, height, metadata):
        c = self.canvas
        field = metadata.get("field")
        path = resolve_image(field, self.data) if field else None
        bottom = self.top(y + height)

        if path:
            try:
                image = ImageReader(path)
                c.drawImage(image, x, bottom, width, height, preserveAspectRatio=True, anchor="c", mask="auto")
                return
            except (OSError, ValueError) as e:
                logger.warning("Failed to load image %s (%s): %s", field, path, e)
                label = "Image Error"
        elif metadata.get("isPlaceholder"):
            label = (field or "image").replace("_", " ").upper()
        else:
            return

        c.saveState()
        c.setStrokeColor(colors.HexColor("#cbd5e1"))
        c.setDash(5, 2)
        c.rect(x, bottom, width, height, stroke=1, fill=0)
        c.setFont("Helvetica", 8 * SCALE)
        c.setFillColor(colors.HexColor("#94a3b8"))
        c.drawCentredString(x + width / 2, bottom + height / 2, label)
        c.restoreState()

    def table_rows(self, table_type, metadata):
        if table_type == "subjects":
            return self.data.subjects
        if table_type in ("affective", "psychomotor"):
            ratings = self.data.affective_traits if table_type == "affective" else self.data.psychomotor_skills
            names = metadata.get("traits") or metadata.get("skills") or list(ratings)
            return [{"name": name, "rating": ratings.get(name)} for name in names]
        return []

    def subject_cell(self, row, column, header):
        header = header.upper()
        if column == 0 or "SUBJECT" in header:
            return row.get("subject", ""), False
        if header == "TOTAL":
            return format_number(row.get("total", 0)), True
        if header == "GRADE":
            return row.get("grade") or "-", False
        if header in ("REMARK", "REMARKS"):
            return row.get("remark") or "-", False
        if header in ("POSITION", "POS", "POS."):
            return format_position(row.get("position")) if row.get("position") else "-", False
        if header in ("HIGHEST", "SUBJECT HIGH", "HIGH"):
            return format_number(row.get("highest")) if row.get("highest") is not None else "-", False
        if "CUM" in header:
            value = row.get("cumulative_average")
            return (f"{value:.1f}" if value is not None else "-"), False
        for name, score in row.get("components", []):
            name = name.upper()
            if name == header or name in header or header in name:
                return format_number(score), False
        return "-", False

    def draw_table(self, element, x, y, width, height, style, metadata):
        c = self.canvas
        rows = int(metadata.get("rows") or 3)
        cols = int(metadata.get("cols") or 3)
        if rows <= 0 or cols <= 0:
            raise TemplateRenderError("Table needs at least one row and column.", element)
        headers = list(metadata.get("headers") or [])
        table_type = metadata.get("tableType")
        border_color = _color(style.get("borderColor"), element) or colors.black
        border_width = _number(style.get("borderWidth", 0.5), "borderWidth", element)
        font_size = _font_size(style, element, default=11)
        text_color = _color(style.get("color"), element) or colors.black
        alt_row_color = _color(style.get("altRowColor"), element)

        proportions = metadata.get("columnWidths")
        if proportions and len(proportions) == cols and sum(proportions) > 0:
            col_widths = [w / sum(proportions) * width for w in proportions]
        else:
            col_widths = [width / cols] * cols

        c.saveState()
        c.setLineWidth(border_width)
        c.setStrokeColor(border_color)

        current = y
        has_headers = any(h and str(h).strip() for h in headers)
        if has_headers:
            header_height = 22 * SCALE
            c.setFillColor(_color(style.get("headerBgColor"), element) or colors.HexColor("#1e293b"))
            c.rect(x, self.top(y + header_height), width, header_height, stroke=0, fill=1)
            c.setFillColor(_color(style.get("headerTextColor"), element) or colors.white)
            c.setFont("Helvetica-Bold", font_size)
            cell_x = x
            for i in range(cols):
                text = str(headers[i] if i < len(headers) else "").upper()
                c.drawCentredString(cell_x + col_widths[i] / 2, self.top(y + header_height / 2) - font_size * 0.35, text)
                cell_x += col_widths[i]
            current += header_height

        row_height = (y + height - current) / rows
        data_rows = self.table_rows(table_type, metadata)

        for r in range(rows):
            if r % 2 == 1 and alt_row_color is not None:
                c.setFillColor(alt_row_color)
                c.rect(x, self.top(current + row_height), width, row_height, stroke=0, fill=1)
            c.line(x, self.top(current), x + width, self.top(current))

            row = data_rows[r] if r < len(data_rows) else None
            cell_x = x
            for col in range(cols):
                text, bold = "", False
                header = str(headers[col]) if col < len(headers) else ""
                if row is not None:
                    if table_type == "subjects":
                        text, bold = self.subject_cell(row, col, header)
                    elif col == 0:
                        text = row["name"]
                    elif cols > 2:
                        text = "X" if str(row["rating"]) == header else ""
                    else:
                        text = "" if row["rating"] is None else str(row["rating"])
                if text:
                    c.setFont("Helvetica-Bold" if bold else "Helvetica", font_size)
                    c.setFillColor(text_color)
                    c.drawCentredString(
                        cell_x + col_widths[col] / 2,
                        self.top(current + row_height / 2) - font_size * 0.35,
                        str(text),
                    )
                if col < cols - 1:
                    c.line(cell_x + col_widths[col], self.top(current),
                           cell_x + col_widths[col], self.top(current + row_height))
                cell_x += col_widths[col]
            current += row_height

        c.rect(x, self.top(current), width, current - y, stroke=1, fill=0)
        c.restoreState()


def render_template(template, data):
    """
    Draw ``template`` (a ResultTemplate or its editor document) with
    ``data``. Never raises for template problems.
    """
    try:
        content = template_content(template)
        pagesize = template_pagesize(content)
        buffer = BytesIO()
        c = pdf_canvas.Canvas(buffer, pagesize=pagesize)
        drawer = TemplateCanvas(c, pagesize[1], data)

        elements = sorted(content["elements"], key=lambda e: int((e or {}).get("page") or 0))
        page = 0
        for element in elements:
            if not isinstance(element, dict):
                raise TemplateRenderError(f"Template element must be an object, got {element!r}.")
            target = int(element.get("page") or 0)
            while page < target:
                c.showPage()
                page += 1
            try:
                drawer.draw(element)
            except TemplateRenderError:
                raise
            except Exception as e:
                raise TemplateRenderError(f"Failed to draw {element.get('type')} element: {e}", element) from e

        c.save()
        return TemplateRenderOutcome(content=buffer.getvalue())
    except TemplateRenderError as e:
        logger.exception("Template rendering failed: %s", e.message)
        return TemplateRenderOutcome(error=e)
    except Exception as e:
        logger.exception("Template rendering failed")
        return TemplateRenderOutcome(error=TemplateRenderError(str(e)))


# -------------------------
# Built-in layout
# -------------------------
def rating_rows(title, ratings):
    """Header and plain-text rows for a trait rating table."""
    return [[title, "RATING"]] + [[str(k), str(v)] for k, v in ratings.items()]


def _safe_color(value, default="#000080"):
    try:
        return colors.toColor(value) if value else colors.HexColor(default)
    except ValueError:
        return colors.HexColor(default)


def _load_image(path, width, height):
    if not path:
        return None
    try:
        ImageReader(path).getSize()
    except (OSError, ValueError) as e:
        logger.warning("Skipping image %s in report: %s", path, e)
        return None
    return Image(path, width=width, height=height, kind="proportional")


def draw_page_decorations(canvas, doc):
    """Footer on every page, plus the watermark when one is configured."""
    page_width, _ = doc.pagesize
    canvas.saveState()

    watermark = getattr(settings, "REPORT_CARD_WATERMARK", "")
    if watermark:
        canvas.setFont('Helvetica-Bold', 40)
        canvas.setFillColor(colors.lightgrey)
        canvas.setFillAlpha(0.15)
        canvas.translate(page_width / 2, doc.pagesize[1] / 2)
        canvas.rotate(45)
        canvas.drawCentredString(0, 0, watermark)
        canvas.restoreState()
        canvas.saveState()

    footer = getattr(settings, "REPORT_CARD_FOOTER", "")
    canvas.setFont('Helvetica', 7)
    canvas.setFillColor(colors.HexColor('#666666'))
    canvas.drawString(0.4 * inch, 0.3 * inch, f"Generated on {datetime.now():%d/%m/%Y %H:%M}. {footer}".strip())
    canvas.drawRightString(page_width - 0.4 * inch, 0.3 * inch, f"Page {doc.page}")
    canvas.restoreState()


def render_fallback(data):
    """Fixed report sheet built from ``data`` alone. Returns PDF bytes."""
    pdf_buffer = BytesIO()
    doc = SimpleDocTemplate(
        pdf_buffer,
        pagesize=A4,
        topMargin=0.4*inch,
        bottomMargin=0.6*inch,
        leftMargin=0.4*inch,
        rightMargin=0.4*inch,
        title=f"{data.student.get('name', '')} Report",
    )
    available_width = A4[0] - 0.8*inch
    primary = _safe_color(data.school.get("primary_color"))

    styles = getSampleStyleSheet()
    school_name_style = ParagraphStyle(
        'SchoolName', parent=styles['Heading1'], fontSize=14, textColor=colors.white,
        spaceAfter=2, alignment=TA_CENTER, fontName='Helvetica-Bold'
    )
    header_text_style = ParagraphStyle(
        'HeaderText', parent=styles['Normal'], fontSize=8, textColor=colors.white, alignment=TA_CENTER
    )
    title_style = ParagraphStyle(
        'ReportTitle', parent=styles['Heading2'], fontSize=11, spaceBefore=6, spaceAfter=6,
        alignment=TA_CENTER, fontName='Helvetica-Bold'
    )
    section_style = ParagraphStyle(
        'SectionHeader', parent=styles['Normal'], fontSize=9, textColor=primary,
        spaceBefore=6, spaceAfter=3, fontName='Helvetica-Bold'
    )
    info_style = ParagraphStyle(
        'Info', parent=styles['Normal'], fontSize=9, textColor=colors.HexColor('#333333'), spaceAfter=2
    )
    comment_style = ParagraphStyle(
        'Comment', parent=styles['Normal'], fontSize=9, textColor=colors.HexColor('#333333'),
        leading=12, alignment=TA_LEFT
    )

    story = []

    # ========== HEADER BAND ==========
    school = data.school
    school_info = [Paragraph(escape(school.get("name", "").upper()), school_name_style)]
    for line in (school.get("address"), school.get("motto") and f"MOTTO: {school['motto']}",
                 " | ".join(v for v in (school.get("phone"), school.get("email"), school.get("website")) if v)):
        if line:
            school_info.append(Paragraph(escape(line), header_text_style))

    logo = _load_image(school.get("logo_path"), 0.8*inch, 0.8*inch) or ""
    photo = _load_image(data.student.get("photo_path"), 0.8*inch, 0.8*inch) or ""
    header_table = Table([[logo, school_info, photo]], colWidths=[1*inch, available_width - 2*inch, 1*inch])
    header_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), primary),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('ALIGN', (0, 0), (0, 0), 'LEFT'),
        ('ALIGN', (1, 0), (1, 0), 'CENTER'),
        ('ALIGN', (2, 0), (2, 0), 'RIGHT'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    story.append(header_table)

    story.append(Paragraph(
        f"REPORT SHEET FOR {escape((data.period_name or '').upper())}, "
        f"{escape(data.session_name or '')} ACADEMIC SESSION",
        title_style
    ))

    # ========== STUDENT INFO PANEL ==========
    student = data.student
    class_info = data.class_info
    class_name = " ".join(v for v in (class_info.get("name"), class_info.get("section")) if v) or "N/A"
    attendance = data.attendance
    attendance_str = (
        f"{attendance['days_present']} out of {attendance['total_days']}"
        if attendance.get("total_days") else "N/A"
    )

    def info(label, value):
        return Paragraph(f"<b>{label}:</b> {escape(str(value if value not in (None, '') else 'N/A'))}", info_style)

    info_table = Table([
        [info("NAME", student.get("name")), info("GENDER", student.get("gender"))],
        [info("CLASS", class_name), info("AGE", student.get("age"))],
        [info("ADMISSION NUMBER", student.get("admission_number")), info("ATTENDANCE", attendance_str)],
        [info("CLASS TEACHER", class_info.get("teacher")),
         info("NUMBER IN CLASS", data.summary.get("students_in_class"))],
    ], colWidths=[available_width / 2, available_width / 2])
    info_table.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
        ('TOPPADDING', (0, 0), (-1, -1), 2),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]))
    story.append(info_table)
    story.append(Spacer(1, 0.1*inch))
    story.append(HRFlowable(width="100%", thickness=1, color=primary))
    story.append(Spacer(1, 0.05*inch))

    # ========== SUBJECT TABLE ==========
    components = list(data.component_names)
    show_cumulative = any(row.get("cumulative_average") is not None for row in data.subjects)
    header_row = ['SUBJECT'] + [name.upper() for name in components] + ['TOTAL', 'GRADE', 'POS.', 'HIGHEST']
    if show_cumulative:
        header_row.append('CUM. AVG')
    header_row.append('REMARK')

    table_data = [header_row]
    for row in data.subjects:
        scores = dict(row.get("components", []))
        cells = [Paragraph(escape(row.get("subject", "")), info_style)]
        cells += [format_number(scores[name]) if name in scores else "-" for name in components]
        cells += [
            format_number(row.get("total")),
            row.get("grade") or "-",
            format_position(row["position"]) if row.get("position") else "-",
            format_number(row["highest"]) if row.get("highest") is not None else "-",
        ]
        if show_cumulative:
            cells.append(f"{row['cumulative_average']:.1f}" if row.get("cumulative_average") is not None else "-")
        cells.append(row.get("remark") or "-")
        table_data.append(cells)

    subject_width = 1.6*inch
    remark_width = 0.9*inch
    other_width = (available_width - subject_width - remark_width) / (len(header_row) - 2)
    total_col = 1 + len(components)
    col_widths = [subject_width] + [other_width] * (len(header_row) - 2) + [remark_width]

    results_table = Table(table_data, colWidths=col_widths, repeatRows=1)
    results_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), primary),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 7),
        ('ALIGN', (1, 1), (-1, -1), 'CENTER'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f5f5f5')]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
        ('BACKGROUND', (total_col, 1), (total_col, -1), colors.HexColor('#ffffcc')),
        ('FONTNAME', (total_col, 1), (total_col, -1), 'Helvetica-Bold'),
    ]))
    story.append(results_table)
    story.append(Spacer(1, 0.1*inch))

    # ========== SUMMARY BAND ==========
    summary = data.summary
    summary_cells = [
        info("TOTAL", format_number(summary.get("total_score"))),
        info("OBTAINABLE", format_number(summary.get("total_obtainable"))),
        info("AVERAGE", format_percentage(summary.get("average"))),
        info("GRADE", summary.get("overall_grade")),
        info("POSITION", f"{format_position(summary.get('position'))} of {summary.get('students_in_class') or 'N/A'}"),
    ]
    summary_table = Table([summary_cells], colWidths=[available_width / 5] * 5)
    summary_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, -1), colors.HexColor('#e8e8e8')),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
    ]))
    story.append(summary_table)

    if data.cumulative:
        story.append(Spacer(1, 0.05*inch))
        story.append(Paragraph(
            f"<b>CUMULATIVE:</b> {data.cumulative.get('term_count') or 1} term(s), "
            f"average {format_percentage(data.cumulative.get('average'))}",
            info_style
        ))
    story.append(Spacer(1, 0.15*inch))

    # ========== TRAITS AND GRADING KEY ==========
    def rating_table(title, ratings):
        table = Table(rating_rows(title, ratings), colWidths=[1.6*inch, 0.6*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), primary),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 7),
            ('ALIGN', (1, 0), (1, -1), 'CENTER'),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f5f5f5')]),
        ]))
        return table

    grading_rows = [['KEY TO GRADING']] + [[line] for line in grading_scale_lines(data)]
    grading_table = Table(grading_rows, colWidths=[2.2*inch])
    grading_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#800000')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 7),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#fff5f5')]),
    ]))

    side_by_side = []
    if data.affective_traits:
        side_by_side.append(rating_table('AFFECTIVE TRAITS', data.affective_traits))
    if data.psychomotor_skills:
        side_by_side.append(rating_table('PSYCHOMOTOR SKILLS', data.psychomotor_skills))
    side_by_side.append(grading_table)
    container = Table([side_by_side], colWidths=[available_width / len(side_by_side)] * len(side_by_side))
    container.setStyle(TableStyle([('VALIGN', (0, 0), (-1, -1), 'TOP')]))
    story.append(container)
    story.append(Spacer(1, 0.15*inch))

    # ========== COMMENTS ==========
    story.append(Paragraph("COMMENTS", section_style))
    story.append(Paragraph(
        f"<b>CLASS TEACHER'S COMMENT:</b> {escape(data.comments.get('teacher') or '-')}", comment_style
    ))
    story.append(Spacer(1, 0.05*inch))
    story.append(Paragraph(
        f"<b>PRINCIPAL'S COMMENT:</b> {escape(data.comments.get('admin') or '-')}", comment_style
    ))

    stamp = _load_image(school.get("stamp_path"), 0.8*inch, 0.8*inch)
    if stamp is not None:
        story.append(Spacer(1, 0.1*inch))
        stamp.hAlign = 'RIGHT'
        story.append(stamp)

    doc.build(story, onFirstPage=draw_page_decorations, onLaterPages=draw_page_decorations)
    return pdf_buffer.getvalue()


def render_report(template, data):
    """
    PDF for ``data``: the template when it draws cleanly, the built-in
    layout otherwise. Returns a RenderedReport.
    """
    error = None
    if template is not None:
        outcome = render_template(template, data)
        if outcome.ok:
            return RenderedReport(outcome.content, False, None)
        error = outcome.error
        logger.warning("Falling back to built-in report layout: %s", error.message)

    return RenderedReport(render_fallback(data), True, error)
