import io
from typing import Protocol

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas


class PdfRenderer(Protocol):
    def render(self, data: dict) -> bytes:
        ...


class OnboardingPdfRenderer:
    """Plain one-page summary of an employee's onboarding record."""

    title = "EMPLOYEE ONBOARDING SUMMARY"

    def render(self, data: dict) -> bytes:
        buf = io.BytesIO()
        c = canvas.Canvas(buf, pagesize=LETTER)
        width, height = LETTER
        y = height - 50

        c.setFont("Helvetica-Bold", 14)
        c.drawString(50, y, self.title)
        y -= 30

        for section, fields in data.items():
            c.setFont("Helvetica-Bold", 11)
            c.drawString(50, y, section.upper())
            y -= 16

            c.setFont("Helvetica", 10)
            for label, value in fields.items():
                c.drawString(60, y, f"{label}:")
                c.drawRightString(width - 60, y, "-" if value is None else str(value))
                y -= 13
                if y < 80:
                    c.showPage()
                    y = height - 50
            y -= 8

        c.showPage()
        c.save()
        return buf.getvalue()
