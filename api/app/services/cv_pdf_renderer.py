import logging
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from app.config import settings
from app.schemas.cv import CVData

logger = logging.getLogger(__name__)

# Block styles; mapped to concrete font names at draw time.
FONT_REGULAR = "regular"
FONT_BOLD = "bold"
FONT_ITALIC = "italic"

CORE_FONTS = {FONT_REGULAR: "Helvetica", FONT_BOLD: "Helvetica-Bold", FONT_ITALIC: "Helvetica-Oblique"}

MARGIN = 10 * mm
RULE_GRAY = 200 / 255.0


@lru_cache(maxsize=8)
def _register_fonts(regular: str, bold: str, italic: str) -> dict[str, str]:
    if not Path(regular).is_file():
        logger.warning("CV font %s not found; using Helvetica, non Latin-1 text will not render", regular)
        return dict(CORE_FONTS)
    faces = {}
    for style, path in ((FONT_REGULAR, regular), (FONT_BOLD, bold), (FONT_ITALIC, italic)):
        if not Path(path).is_file():
            path = regular
        name = Path(path).stem
        pdfmetrics.registerFont(TTFont(name, path))
        faces[style] = name
    logger.info("Registered CV fonts: %s", faces)
    return faces


def resolve_fonts() -> dict[str, str]:
    """Style -> registered font name for the configured TrueType faces."""
    return _register_fonts(settings.pdf_font_regular, settings.pdf_font_bold, settings.pdf_font_italic)


@dataclass(frozen=True)
class Block:
    """
    One drawing step. ``kind`` is "line" (single-line cell), "para" (wrapped
    text) or "rule" (horizontal separator). ``advance`` is the vertical space
    consumed after the block; for "para" it is the per-line leading.
    """

    kind: str
    text: str = ""
    font: str = FONT_REGULAR
    size: float = 11
    advance: float = 0
    space_after: float = 0


RULE = Block("rule", advance=10 * mm)


def _line(text: str, font: str = FONT_REGULAR, size: float = 11, advance: float = 6 * mm) -> Block:
    return Block("line", text, font, size, advance)


def _para(text: str, size: float = 11, leading: float = 6 * mm, space_after: float = 0) -> Block:
    return Block("para", text, FONT_REGULAR, size, leading, space_after)


def _section(heading: str, body: list[Block]) -> list[Block]:
    return [_line(heading, FONT_BOLD, 14, 10 * mm), *body, RULE]


def layout_cv(cv: CVData) -> list[Block]:
    """
    Ordered drawing steps for a CV: header, summary, then education, work
    experience and skills, each omitted when its list is empty.
    """
    blocks = [
        _line(cv.full_name, FONT_BOLD, 24, 12 * mm),
        _line(cv.title, FONT_REGULAR, 14, 8 * mm),
        _line(f"{cv.email} | {cv.phone}", FONT_REGULAR, 10, 10 * mm),
        RULE,
    ]
    blocks += _section("Summary", [_para(cv.summary, space_after=10 * mm)])

    if cv.education:
        entries = []
        for edu in cv.education:
            entries += [
                _line(edu.institution, FONT_BOLD, advance=5 * mm),
                _line(edu.major, advance=5 * mm),
                _line(edu.year, FONT_ITALIC, advance=8 * mm),
            ]
        blocks += _section("Education", entries)

    if cv.work_experience:
        entries = []
        for exp in cv.work_experience:
            entries += [
                _line(f"{exp.position} at {exp.company}", FONT_BOLD, advance=5 * mm),
                _line(exp.year, FONT_ITALIC, advance=6 * mm),
                _para(exp.description, leading=5 * mm, space_after=8 * mm),
            ]
        blocks += _section("Work Experience", entries)

    if cv.skills:
        blocks += _section("Skills", [_para(", ".join(cv.skills), space_after=10 * mm)])

    return blocks


class _PageWriter:
    """Top-down cursor over a reportlab canvas; starts a new page at the bottom margin."""

    def __init__(self, out: BytesIO, fonts: dict[str, str] | None = None) -> None:
        self.canvas = canvas.Canvas(out, pagesize=A4)
        self.fonts = fonts or CORE_FONTS
        self.width, self.height = A4
        self.y = self.height - MARGIN

    @property
    def content_width(self) -> float:
        return self.width - 2 * MARGIN

    def _ensure_space(self, needed: float) -> None:
        if self.y - needed < MARGIN:
            self.canvas.showPage()
            self.y = self.height - MARGIN

    def _text_line(self, text: str, font: str, size: float, advance: float) -> None:
        self._ensure_space(max(advance, size))
        self.canvas.setFont(self.fonts[font], size)
        # Cursor is the top of the cell; reportlab draws from the baseline.
        self.canvas.drawString(MARGIN, self.y - size, text)
        self.y -= advance

    def draw(self, block: Block) -> None:
        if block.kind == "line":
            self._text_line(block.text, block.font, block.size, block.advance)
        elif block.kind == "para":
            for line in simpleSplit(block.text, self.fonts[block.font], block.size, self.content_width):
                self._text_line(line, block.font, block.size, block.advance)
            self.y -= block.space_after
        elif block.kind == "rule":
            self._ensure_space(block.advance)
            self.canvas.setStrokeColorRGB(RULE_GRAY, RULE_GRAY, RULE_GRAY)
            self.canvas.line(MARGIN, self.y, self.width - MARGIN, self.y)
            self.y -= block.advance
        else:
            raise ValueError(f"Unknown block kind: {block.kind}")

    def save(self) -> None:
        self.canvas.save()


def render_cv_pdf(cv: CVData) -> bytes:
    """
    Render a CV to PDF bytes.
    Raises RuntimeError if the document cannot be drawn or serialized; nothing
    is returned in that case, so callers never see a partial document.
    """
    out = BytesIO()
    try:
        writer = _PageWriter(out, resolve_fonts())
        writer.canvas.setTitle(f"CV - {cv.full_name}".strip(" -"))
        writer.canvas.setAuthor(cv.full_name)
        for block in layout_cv(cv):
            writer.draw(block)
        writer.save()
    except Exception as e:
        logger.exception("CV PDF render failed: %s", e)
        raise RuntimeError("PDF generation failed") from e
    pdf = out.getvalue()
    logger.info("Rendered CV PDF for %r: %d bytes", cv.full_name, len(pdf))
    return pdf
