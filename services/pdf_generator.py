# pdf_generator.py
# PDF generation for shift handover reports using reportlab

import re
from io import BytesIO
from datetime import datetime
from typing import List, Optional
from xml.sax.saxutils import escape
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from reportlab.lib.enums import TA_LEFT, TA_CENTER

from core.config import HOSPITAL_NAME, PDF_HEADER_COLOR
from services.reports import HandoverReport


class HandoverReportPDFGenerator:
    """Renders a HandoverReport as a one-or-more page PDF"""

    def __init__(self, hospital_name: Optional[str] = None, header_color: Optional[str] = None):
        """Initialize PDF generator with styling and configuration"""
        self.hospital_name = hospital_name or HOSPITAL_NAME

        # Page dimensions
        self.page_width, self.page_height = letter
        self.margin = 0.75 * inch

        # Colors
        self.header_color = colors.HexColor(header_color or PDF_HEADER_COLOR)
        self.text_color = colors.black
        self.light_gray = colors.HexColor("#F0F0F0")

        # Fonts and sizes
        self.title_font = "Helvetica-Bold"
        self.section_font = "Helvetica-Bold"
        self.body_font = "Helvetica"
        self.body_size = 11
        self.small_size = 9

        self.styles = getSampleStyleSheet()

        self.title_style = ParagraphStyle(
            'HandoverTitle',
            parent=self.styles['Heading1'],
            fontName=self.title_font,
            fontSize=16,
            textColor=self.header_color,
            alignment=TA_CENTER,
            spaceAfter=12
        )

        self.section_style = ParagraphStyle(
            'HandoverSection',
            parent=self.styles['Heading2'],
            fontName=self.section_font,
            fontSize=14,
            textColor=self.header_color,
            spaceAfter=6,
            spaceBefore=12
        )

        self.body_style = ParagraphStyle(
            'HandoverBody',
            parent=self.styles['BodyText'],
            fontName=self.body_font,
            fontSize=self.body_size,
            textColor=self.text_color,
            alignment=TA_LEFT,
            leading=13  # Line spacing
        )

        self.bullet_style = ParagraphStyle(
            'HandoverBullet',
            parent=self.body_style,
            leftIndent=20,
            bulletIndent=10,
            spaceBefore=3,
            spaceAfter=3
        )

    def generate_handover_pdf(self, report: HandoverReport) -> bytes:
        """
        Generate the shift handover PDF

        Args:
            report: Report built by services.reports.build_handover_report

        Returns:
            PDF file as bytes
        """
        buffer = BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=self.margin,
            leftMargin=self.margin,
            topMargin=self.margin + 0.5*inch,  # Extra space for header
            bottomMargin=self.margin + 0.3*inch  # Extra space for footer
        )

        story = []
        story.append(Paragraph("SHIFT HANDOVER REPORT", self.title_style))
        story.append(Spacer(1, 0.2*inch))

        story.extend(self._add_summary_section(report))
        story.append(Spacer(1, 0.2*inch))

        story.extend(self._add_bullet_section(
            "Critical Updates", report.critical_updates, "No critical patients at this time"))
        story.extend(self._add_bullet_section(
            "Pending Orders", report.pending_order_lines, "No pending orders"))
        story.extend(self._add_notes_section(report.notes))

        doc.build(
            story,
            onFirstPage=self._add_header_footer,
            onLaterPages=self._add_header_footer
        )

        pdf_bytes = buffer.getvalue()
        buffer.close()

        return pdf_bytes

    def _add_summary_section(self, report: HandoverReport) -> list:
        """Create the headline counts table"""
        elements = []

        elements.append(Paragraph("SUMMARY", self.section_style))

        data = [
            ["Total Patients:", str(report.total_patients)],
            ["Critical Patients:", str(report.critical_patients)],
            ["Pending Orders:", str(report.pending_orders)],
            ["Report Time:", report.timestamp],
        ]

        table = Table(data, colWidths=[2.5*inch, 4.5*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), self.light_gray),
            ('FONTNAME', (0, 0), (0, -1), self.section_font),
            ('FONTNAME', (1, 0), (-1, -1), self.body_font),
            ('FONTSIZE', (0, 0), (-1, -1), self.body_size),
            ('PADDING', (0, 0), (-1, -1), 6),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.gray),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]))

        elements.append(table)
        return elements

    def _add_bullet_section(self, title: str, lines: List[str], empty_text: str) -> list:
        elements = [Paragraph(title.upper(), self.section_style)]
        for line in lines or [empty_text]:
            elements.append(Paragraph(f"• {escape(line)}", self.bullet_style))
        elements.append(Spacer(1, 0.08*inch))
        return elements

    def _add_notes_section(self, notes: str) -> list:
        """Free-text notes; blank lines separate paragraphs"""
        elements = [Paragraph("NOTES FOR NEXT SHIFT", self.section_style)]
        paragraphs = [p.strip() for p in re.split(r'\n\s*\n', notes or "") if p.strip()]
        if not paragraphs:
            elements.append(Paragraph("<i>No additional notes.</i>", self.body_style))
        for para in paragraphs:
            elements.append(Paragraph(escape(' '.join(para.split())), self.body_style))
            elements.append(Spacer(1, 0.08*inch))
        return elements

    def _add_header_footer(self, canvas, doc):
        """Add header and footer to each page"""
        canvas.saveState()

        # Header
        canvas.setFont(self.title_font, 10)
        canvas.setFillColor(self.header_color)
        canvas.drawString(self.margin, self.page_height - 0.5*inch, self.hospital_name.upper())

        canvas.setFont(self.body_font, 9)
        canvas.setFillColor(colors.gray)
        generation_date = datetime.now().strftime("%B %d, %Y %H:%M")
        canvas.drawRightString(self.page_width - self.margin, self.page_height - 0.5*inch, f"Generated: {generation_date}")

        canvas.setStrokeColor(self.header_color)
        canvas.setLineWidth(1)
        canvas.line(self.margin, self.page_height - 0.6*inch, self.page_width - self.margin, self.page_height - 0.6*inch)

        # Footer
        canvas.setFont(self.body_font, self.small_size)
        canvas.setFillColor(colors.gray)
        canvas.drawCentredString(self.page_width / 2, 0.5*inch, f"Page {doc.page}")
        canvas.drawRightString(self.page_width - self.margin, 0.5*inch, "CONFIDENTIAL MEDICAL INFORMATION")

        canvas.restoreState()
