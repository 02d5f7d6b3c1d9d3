"""
docintake: converts uploaded documents (text, PDF, DOCX, images) into plaintext for a downstream reasoning engine.
"""

__version__ = "0.1.0"
