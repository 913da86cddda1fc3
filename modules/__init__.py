"""Document processing modules for PrintU Kiosk."""

__all__ = [
    "imposition",
    "pdf_analyzer",
    "transform_chain",
]
