"""
Density heuristic: is a PDF's text layer too thin to trust?
A page-count-relative proxy for "image-only or garbled extraction", no per-page visual inspection.
"""

DEFAULT_CHARS_PER_PAGE = 50


def text_density(full_text: str, page_count: int) -> float:
    """Trimmed characters per page (0.0 when there are no pages)."""
    if page_count <= 0:
        return 0.0
    return len((full_text or "").strip()) / page_count


def needs_ocr(full_text: str, page_count: int, chars_per_page: int = DEFAULT_CHARS_PER_PAGE) -> bool:
    """True when page_count > 0 and trimmed text length < chars_per_page * page_count."""
    if page_count <= 0:
        return False
    return len((full_text or "").strip()) < chars_per_page * page_count
