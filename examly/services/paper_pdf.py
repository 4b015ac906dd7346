"""
Question paper PDF: header block, then one section per question type.
"""

from datetime import datetime
from io import BytesIO
from typing import List, Optional
import base64
import logging

from pydantic import BaseModel
from reportlab.lib.utils import ImageReader

from examly.config import settings
from examly.models.records import QuestionRecord
from examly.services.pdf_writer import BOLD_FONT, PdfWriter

logger = logging.getLogger(__name__)

TRIAL_WATERMARK = "Trial version, get Package to set Your Water Mark."

SECTION_HEADINGS = {
    "mcq": "Objective Part: Choose the correct option",
    "short": "Short Questions: Answer briefly",
    "long": "Long Questions: Answer in detail",
}

class PaperSection(BaseModel):
    question_type: str
    marks_each: int = 1
    questions: List[QuestionRecord] = []

    @property
    def total_marks(self) -> int:
        return self.marks_each * len(self.questions)

def format_time(minutes: Optional[int]) -> str:
    """'45 Minutes' below an hour, otherwise hours and minutes"""
    if not minutes or minutes <= 0:
        return "-"
    if minutes < 60:
        return f"{minutes} Minutes"
    hours, rest = divmod(minutes, 60)
    label = f"{hours} Hour" if hours == 1 else f"{hours} Hours"
    return f"{label} {rest} Minutes" if rest else label

def paper_filename(title: Optional[str]) -> str:
    safe = "".join(ch if (ch.isascii() and ch.isalnum()) or ch in "_-." else "_" for ch in (title or "paper"))
    return f"{safe}.pdf"

def load_logo(logo: Optional[str]) -> Optional[ImageReader]:
    """Image for a profile logo given as a URL or a base64 ``data:`` URI.

    A logo that cannot be read is logged and skipped so the paper still renders.
    """
    if not logo:
        return None
    try:
        if logo.startswith("data:"):
            _, _, encoded = logo.partition(",")
            image = ImageReader(BytesIO(base64.b64decode(encoded)))
        else:
            image = ImageReader(logo)
        image.getSize()
        return image
    except Exception as e:
        logger.warning(f"Could not load logo for watermark: {e}")
        return None

def build_paper(
    title: str,
    class_name: str,
    subject_name: str,
    sections: List[PaperSection],
    time_minutes: Optional[int] = None,
    paper_date: Optional[datetime] = None,
    institute_name: Optional[str] = None,
    paid: bool = False,
    logo: Optional[str] = None,
) -> PdfWriter:
    """Lay out the paper.

    The owner's logo, when set, heads the first page. Free and trial papers
    carry the trial watermark; paid papers carry the logo as their watermark
    and no watermark when there is none.
    """
    paper_date = paper_date or datetime.now(settings.tz)
    total_marks = sum(section.total_marks for section in sections)

    logo_image = load_logo(logo)
    if paid:
        writer = PdfWriter(title=title, continued_header=f"{title} (continued)", watermark_image=logo_image)
    else:
        writer = PdfWriter(title=title, continued_header=f"{title} (continued)", watermark_text=TRIAL_WATERMARK)

    if logo_image:
        writer.image(logo_image, width=140, height=50)
        writer.gap(4)
    if institute_name:
        writer.text(institute_name, font=BOLD_FONT, size=18, align="center")
    writer.text(title, font=BOLD_FONT, size=16, align="center")
    writer.gap(4)
    writer.columns(left=f"Class: {class_name}", right=f"Subject: {subject_name}", size=11)
    writer.columns(
        left=f"Time Allowed: {format_time(time_minutes)}",
        center=f"Total Marks: {total_marks}",
        right=f"Date: {paper_date.strftime('%d-%m-%Y')}",
        size=10,
    )
    writer.rule(8)

    for section in sections:
        if not section.questions:
            continue

        writer.ensure_space(50)
        heading = SECTION_HEADINGS.get(section.question_type, section.question_type.title())
        writer.text(
            f"{heading} ({len(section.questions)} x {section.marks_each} = {section.total_marks})",
            font=BOLD_FONT,
            size=12,
        )
        writer.gap(4)

        for number, question in enumerate(section.questions, start=1):
            writer.ensure_space(30)
            writer.text(f"{number}. {question.question_text}", size=11)
            if section.question_type == "mcq":
                for letter, option in question.options():
                    if option:
                        writer.text(f"({letter}) {option}", size=10, indent=18)
            writer.gap(6)

        writer.gap(8)

    return writer

def render_paper(
    title: str,
    class_name: str,
    subject_name: str,
    sections: List[PaperSection],
    time_minutes: Optional[int] = None,
    paper_date: Optional[datetime] = None,
    institute_name: Optional[str] = None,
    paid: bool = False,
    logo: Optional[str] = None,
) -> bytes:
    return build_paper(
        title, class_name, subject_name, sections, time_minutes, paper_date,
        institute_name=institute_name, paid=paid, logo=logo,
    ).finish()
