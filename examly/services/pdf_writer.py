"""
Cursor-based text layout on reportlab pages.

Text is laid top to bottom; when the cursor would drop below the bottom
margin a new page is started and the shortened header is repeated. Every
line drawn is also recorded per page in ``pages`` so layouts can be
inspected without parsing the PDF. Watermarks drawn on each page are
recorded in ``watermarks``.
"""

from io import BytesIO
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

PAGE_WIDTH, PAGE_HEIGHT = A4
LEFT_MARGIN = 50
RIGHT_MARGIN = 50
TOP_MARGIN = 50
BOTTOM_MARGIN = 60

BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

WATERMARK_ALPHA = 0.1
WATERMARK_ANGLE = 45
WATERMARK_IMAGE_SIZE = 300

class PdfWriter:
    def __init__(
        self,
        title: str = "",
        continued_header: Optional[str] = None,
        watermark_text: Optional[str] = None,
        watermark_image: Optional[ImageReader] = None,
    ):
        self.buffer = BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        if title:
            self.canvas.setTitle(title)
        self.continued_header = continued_header
        self.watermark_text = watermark_text
        self.watermark_image = watermark_image
        self.pages: List[List[str]] = [[]]
        self.watermarks: List[List[str]] = [[]]
        self.images: List[int] = []
        self.y = PAGE_HEIGHT - TOP_MARGIN
        self._draw_watermark()

    @property
    def content_width(self) -> float:
        return PAGE_WIDTH - LEFT_MARGIN - RIGHT_MARGIN

    def _draw_watermark(self):
        """Faint diagonal mark across the middle of the current page"""
        if not self.watermark_image and not self.watermark_text:
            return

        c = self.canvas
        c.saveState()
        c.translate(PAGE_WIDTH / 2, PAGE_HEIGHT / 2)
        c.rotate(WATERMARK_ANGLE)
        c.setFillAlpha(WATERMARK_ALPHA)
        if self.watermark_image:
            half = WATERMARK_IMAGE_SIZE / 2
            c.drawImage(self.watermark_image, -half, -half, width=WATERMARK_IMAGE_SIZE,
                        height=WATERMARK_IMAGE_SIZE, preserveAspectRatio=True, anchor="c", mask="auto")
            self.watermarks[-1].append("image")
        else:
            c.setFont(BOLD_FONT, 20)
            c.setFillGray(0.3)
            c.drawCentredString(0, 0, self.watermark_text)
            self.watermarks[-1].append(self.watermark_text)
        c.restoreState()

    def new_page(self):
        self.canvas.showPage()
        self.pages.append([])
        self.watermarks.append([])
        self.y = PAGE_HEIGHT - TOP_MARGIN
        self._draw_watermark()
        if self.continued_header:
            self.text(self.continued_header, font=BOLD_FONT, size=12, align="center")
            self.gap(8)

    def ensure_space(self, height: float):
        if self.y - height < BOTTOM_MARGIN:
            self.new_page()

    def gap(self, height: float):
        self.y -= height

    def text(self, text: str, font: str = BODY_FONT, size: float = 11, indent: float = 0,
             align: str = "left", leading: Optional[float] = None):
        """Draw ``text`` wrapped to the page width, breaking pages as needed"""
        leading = leading or size * 1.35
        width = self.content_width - indent
        lines = simpleSplit(text or "", font, size, width) or [""]

        for line in lines:
            self.ensure_space(leading)
            self.y -= leading
            self.canvas.setFont(font, size)
            if align == "center":
                self.canvas.drawCentredString(PAGE_WIDTH / 2, self.y, line)
            elif align == "right":
                self.canvas.drawRightString(PAGE_WIDTH - RIGHT_MARGIN, self.y, line)
            else:
                self.canvas.drawString(LEFT_MARGIN + indent, self.y, line)
            self.pages[-1].append(line)

    def columns(self, left: str = "", center: str = "", right: str = "", font: str = BODY_FONT,
                size: float = 11, leading: Optional[float] = None):
        """One unwrapped row with text pinned to the left margin, the middle and the right margin"""
        leading = leading or size * 1.35
        self.ensure_space(leading)
        self.y -= leading
        self.canvas.setFont(font, size)
        if left:
            self.canvas.drawString(LEFT_MARGIN, self.y, left)
            self.pages[-1].append(left)
        if center:
            self.canvas.drawCentredString(PAGE_WIDTH / 2, self.y, center)
            self.pages[-1].append(center)
        if right:
            self.canvas.drawRightString(PAGE_WIDTH - RIGHT_MARGIN, self.y, right)
            self.pages[-1].append(right)

    def image(self, image: ImageReader, width: float, height: float):
        """Centre an image at the cursor, scaled to fit ``width`` x ``height``"""
        self.ensure_space(height)
        self.y -= height
        self.canvas.drawImage(image, (PAGE_WIDTH - width) / 2, self.y, width=width, height=height,
                              preserveAspectRatio=True, anchor="c", mask="auto")
        self.images.append(len(self.pages) - 1)

    def rule(self, space: float = 6):
        self.ensure_space(space * 2)
        self.y -= space
        self.canvas.setLineWidth(0.5)
        self.canvas.line(LEFT_MARGIN, self.y, PAGE_WIDTH - RIGHT_MARGIN, self.y)
        self.y -= space

    def finish(self) -> bytes:
        self.canvas.save()
        return self.buffer.getvalue()
