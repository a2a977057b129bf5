# In app/tools/pdf_generator.py


def create_pdf(html_content: str, css_content: str) -> bytes:
    """Renders HTML and CSS content into PDF bytes using WeasyPrint.

    WeasyPrint is imported here rather than at module load because it needs
    Pango at import time; the rest of the app stays importable without it.
    Errors propagate to the caller.
    """
    from weasyprint import HTML, CSS

    css = CSS(string=css_content)
    html = HTML(string=html_content, base_url=".")
    return html.write_pdf(stylesheets=[css])
