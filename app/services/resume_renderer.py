"""Render a resume into paginated PDF bytes.

Sections are looked up in a registry keyed by section name and visited in the
resume's `sectionOrder`. Each section writes its HTML into a LayoutContext
owned by a single render call; the finished document is laid out and
paginated by WeasyPrint (A4, fixed margins).

Nothing time- or randomness-dependent goes into the document, so identical
input renders to identical bytes apart from the PDF writer metadata
(/CreationDate, /ModDate and the trailer /ID).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from jinja2 import DictLoader, Environment, StrictUndefined, select_autoescape
from markupsafe import Markup

from app.core.exceptions import RenderFailure
from app.schemas.ResumeSchemas import PersonalInfo, Resume, Styling
from app.services.pdf_service import page_count
from app.tools.pdf_generator import create_pdf

logger = logging.getLogger(__name__)

PLACEHOLDER = "N/A"
CONTACT_SEPARATOR = " | "

# points
PAGE_MARGINS = {"top": 50, "bottom": 50, "left": 60, "right": 60}

# Used when a resume has no sectionOrder of its own
DEFAULT_SECTION_ORDER = (
    "summary",
    "education",
    "skills",
    "workExperience",
    "projects",
    "customSections",
    "certifications",
    "languages",
)

FONT_STACKS = {
    "Arial": "Arial, 'Liberation Sans', Helvetica, sans-serif",
    "Helvetica": "Helvetica, Arial, 'Liberation Sans', sans-serif",
    "Calibri": "Calibri, Carlito, Arial, sans-serif",
    "Georgia": "Georgia, 'DejaVu Serif', serif",
    "Times New Roman": "'Times New Roman', 'Liberation Serif', Times, serif",
}

# spacing -> (line-height, gap between sections in pt, gap between entries in pt)
SPACING = {
    "compact": (1.2, 6, 4),
    "normal": (1.35, 10, 7),
    "relaxed": (1.5, 14, 10),
}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_month_year(value: Optional[datetime]) -> str:
    """`Mon YYYY`, locale independent. Empty string for a missing date."""
    if value is None:
        return ""
    return f"{_MONTHS[value.month - 1]} {value.year}"


def format_date_range(start: Optional[datetime], end: Optional[datetime], is_current: bool = False) -> str:
    """Join start and end into `Mon YYYY – Mon YYYY`.

    A current entry always ends in "Present". A missing end date on an entry
    that is not current is left off, so only the start date shows.
    """
    start_text = format_month_year(start)
    end_text = "Present" if is_current else format_month_year(end)
    if start_text and end_text:
        return f"{start_text} – {end_text}"
    return start_text or end_text


def short_url(url: Optional[str]) -> str:
    """linkedin.com/in/jane instead of https://www.linkedin.com/in/jane/."""
    if not url:
        return ""
    text = url.strip()
    for scheme in ("https://", "http://"):
        if text.lower().startswith(scheme):
            text = text[len(scheme):]
            break
    if text.lower().startswith("www."):
        text = text[4:]
    return text.rstrip("/")


TEMPLATES = {
    "document.html": """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{{ title }}</title></head>
<body>
<header class="header">
  <h1 class="name">{{ header.name }}</h1>
  {% if header.location %}<p class="location">{{ header.location }}</p>{% endif %}
  {% if header.contacts %}<p class="contact">{{ header.contacts | join(separator) }}</p>{% endif %}
</header>
{{ body }}
</body>
</html>
""",
    "section.html": """<section class="section section-{{ key }}">
  <hr class="rule">
  <h2 class="heading">{{ title }}</h2>
  {{ body }}
</section>
""",
    "summary.html": """{% for text in entries %}<p class="summary">{{ text }}</p>{% endfor %}""",
    "education.html": """{% for edu in entries %}
<div class="entry">
  <div class="row"><span class="primary">{{ edu.institution }}</span><span class="right">{{ edu.completionYear }}</span></div>
  <div class="row"><span class="secondary">{{ edu.degree }} in {{ edu.field }}</span>{% if edu.grade %}<span class="right">{{ edu.grade }}</span>{% endif %}</div>
</div>
{% endfor %}""",
    "workExperience.html": """{% for exp in entries %}
<div class="entry">
  <div class="row"><span class="primary">{{ exp.company }}</span><span class="right">{{ exp.startDate | date_range(exp.endDate, exp.isCurrent) }}</span></div>
  <div class="row"><span class="secondary">{{ exp.position }}</span>{% if exp.location %}<span class="right">{{ exp.location }}</span>{% endif %}</div>
  {% if exp.description %}<p class="description">{{ exp.description }}</p>{% endif %}
  {% if exp.achievements %}<ul class="bullets">{% for item in exp.achievements %}<li>{{ item }}</li>{% endfor %}</ul>{% endif %}
</div>
{% endfor %}""",
    "skills.html": """<p class="inline-list">{% for skill in entries %}{{ skill.name }} ({{ skill.level }}){% if not loop.last %}, {% endif %}{% endfor %}</p>""",
    "certifications.html": """{% for cert in entries %}
<div class="entry">
  <div class="row"><span class="primary">{{ cert.name }} - {{ cert.issuer }}</span><span class="right">Issued {{ cert.issueDate | month_year }}{% if cert.expiryDate %} · Expires {{ cert.expiryDate | month_year }}{% endif %}</span></div>
  {% if cert.credentialId or cert.credentialUrl %}<div class="row"><span class="secondary">{% if cert.credentialId %}Credential ID {{ cert.credentialId }}{% endif %}{% if cert.credentialUrl %}{% if cert.credentialId %} · {% endif %}<a href="{{ cert.credentialUrl }}">{{ cert.credentialUrl | short_url }}</a>{% endif %}</span></div>{% endif %}
</div>
{% endfor %}""",
    "projects.html": """{% for proj in entries %}
<div class="entry">
  <div class="row"><span class="primary">{{ proj.title }}{% if proj.technologies %}<span class="secondary"> | {{ proj.technologies | join(", ") }}</span>{% endif %}{% if proj.url %} | <a href="{{ proj.url }}">Link</a>{% endif %}</span>{% if proj.startDate or proj.endDate %}<span class="right">{{ proj.startDate | date_range(proj.endDate) }}</span>{% endif %}</div>
  {% if proj.description %}<ul class="bullets"><li>{{ proj.description }}</li></ul>{% endif %}
</div>
{% endfor %}""",
    "languages.html": """<p class="inline-list">{% for lang in entries %}{{ lang.name }} ({{ lang.proficiency }}){% if not loop.last %}, {% endif %}{% endfor %}</p>""",
    "customSection.html": """{% for section in entries %}
{% if section.content %}<p class="description">{{ section.content }}</p>{% endif %}
{% if section.items %}<ul class="bullets">{% for item in section.items %}<li>{{ item }}</li>{% endfor %}</ul>{% endif %}
{% endfor %}""",
    "styles.css": """@page { size: A4; margin: {{ margins.top }}pt {{ margins.right }}pt {{ margins.bottom }}pt {{ margins.left }}pt; }
body { font-family: {{ font_stack }}; font-size: {{ styling.fontSize }}pt; line-height: {{ line_height }}; color: {{ styling.primaryColor }}; margin: 0; }
.header { text-align: center; margin-bottom: {{ section_gap }}pt; }
.name { font-size: {{ styling.fontSize * 2 + 2 }}pt; font-weight: bold; margin: 0 0 4pt 0; }
.location { margin: 0 0 2pt 0; }
.contact { margin: 0; font-size: {{ styling.fontSize - 1 }}pt; color: #333333; }
.section { margin-top: {{ section_gap }}pt; }
.rule { border: none; border-top: 0.5pt solid {{ styling.accentColor }}; margin: 0 0 4pt 0; }
.heading { font-size: {{ styling.fontSize + 1 }}pt; font-weight: bold; margin: 0 0 4pt 0; page-break-after: avoid; }
.entry { margin-bottom: {{ entry_gap }}pt; page-break-inside: avoid; }
.row { display: flex; justify-content: space-between; }
.primary { font-weight: bold; }
.secondary { font-style: italic; color: #333333; }
.right { text-align: right; padding-left: 12pt; }
.summary, .description, .inline-list { margin: 2pt 0; }
.bullets { margin: 2pt 0 0 0; padding-left: 14pt; }
a { color: {{ styling.accentColor }}; text-decoration: underline; }
""",
}


def _get_env() -> Environment:
    env = Environment(
        loader=DictLoader(TEMPLATES),
        autoescape=select_autoescape(enabled_extensions=("html",), default=False),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["month_year"] = format_month_year
    env.filters["date_range"] = format_date_range
    env.filters["short_url"] = short_url
    return env


class LayoutContext:
    """Output of one render call.

    Not shared between renders: every call to render_resume_html builds its
    own context and is the only writer to it.
    """

    def __init__(self, env: Environment):
        self._env = env
        self._blocks: List[str] = []
        self.sections: List[str] = []

    def add_section(self, key: str, title: str, template: str, entries: Sequence) -> None:
        body = Markup(self._env.get_template(template).render(entries=entries))
        self._blocks.append(self._env.get_template("section.html").render(key=key, title=title, body=body))
        self.sections.append(key)

    def markup(self) -> Markup:
        return Markup("".join(self._blocks))


@dataclass(frozen=True)
class SectionRenderer:
    key: str
    title: str
    template: str
    select: Callable[[Resume], list]

    def has_content(self, resume: Resume) -> bool:
        return bool(self.select(resume))

    def render(self, ctx: LayoutContext, resume: Resume) -> None:
        ctx.add_section(self.key, self.title, self.template, self.select(resume))


class CustomSectionRenderer(SectionRenderer):
    """Every custom section gets its own heading, taken from its title."""

    def render(self, ctx: LayoutContext, resume: Resume) -> None:
        for section in self.select(resume):
            ctx.add_section(self.key, section.title, self.template, [section])


def _visible(attr: str) -> Callable[[Resume], list]:
    def select(resume: Resume) -> list:
        return [entry for entry in getattr(resume, attr) if entry.visible]
    return select


def _summary(resume: Resume) -> list:
    return [resume.summary] if resume.summary and resume.summary.strip() else []


def _custom_sections(resume: Resume) -> list:
    return [s for s in resume.customSections if s.visible and (s.content or s.items)]


SECTION_RENDERERS: List[SectionRenderer] = [
    SectionRenderer("summary", "Professional Summary", "summary.html", _summary),
    SectionRenderer("education", "Education", "education.html", _visible("education")),
    SectionRenderer("skills", "Technical Skills", "skills.html", _visible("skills")),
    SectionRenderer("workExperience", "Experience", "workExperience.html", _visible("workExperience")),
    SectionRenderer("projects", "Projects", "projects.html", _visible("projects")),
    CustomSectionRenderer("customSections", "", "customSection.html", _custom_sections),
    SectionRenderer("certifications", "Certifications", "certifications.html", _visible("certifications")),
    SectionRenderer("languages", "Languages", "languages.html", _visible("languages")),
]

_RENDERERS_BY_KEY: Dict[str, SectionRenderer] = {r.key: r for r in SECTION_RENDERERS}


def plan_sections(resume: Resume) -> List[str]:
    """Section keys that will be rendered, in render order."""
    order = resume.sectionOrder or DEFAULT_SECTION_ORDER
    return [key for key in order if key in _RENDERERS_BY_KEY and _RENDERERS_BY_KEY[key].has_content(resume)]


def build_header(info: PersonalInfo) -> Dict[str, object]:
    address = info.address
    location_parts = [address.city, address.state, address.country] if address else []
    contacts = [
        info.phone,
        info.email,
        short_url(info.linkedIn),
        short_url(info.github),
        short_url(info.website),
    ]
    return {
        "name": info.fullName or PLACEHOLDER,
        "location": ", ".join(p for p in location_parts if p),
        "contacts": [c for c in contacts if c],
    }


def render_resume_html(resume: Resume, env: Optional[Environment] = None) -> str:
    env = env or _get_env()
    ctx = LayoutContext(env)
    for key in plan_sections(resume):
        _RENDERERS_BY_KEY[key].render(ctx, resume)
    return env.get_template("document.html").render(
        title=resume.title,
        header=build_header(resume.personalInfo),
        separator=CONTACT_SEPARATOR,
        body=ctx.markup(),
    )


def render_stylesheet(styling: Styling, env: Optional[Environment] = None) -> str:
    env = env or _get_env()
    line_height, section_gap, entry_gap = SPACING[styling.spacing]
    return env.get_template("styles.css").render(
        styling=styling,
        margins=PAGE_MARGINS,
        font_stack=FONT_STACKS[styling.fontFamily],
        line_height=line_height,
        section_gap=section_gap,
        entry_gap=entry_gap,
    )


def render_resume_pdf(resume: Resume) -> bytes:
    """Render the whole resume or raise RenderFailure; never partial output."""
    try:
        env = _get_env()
        pdf = create_pdf(render_resume_html(resume, env), render_stylesheet(resume.styling, env))
        pages = page_count(pdf)
    except Exception as e:
        logger.exception("Rendering resume %s failed", resume.id)
        raise RenderFailure(f"Failed to render resume PDF: {e}") from e

    logger.info("Rendered resume %s (%d pages, %d bytes)", resume.id, pages, len(pdf))
    return pdf
