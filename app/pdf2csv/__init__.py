"""
PDF to CSV Backend Application.

A FastAPI service that extracts the text of a PDF document, asks an
OpenAI model to structure it as a table and saves the result as CSV.
"""

__version__ = "1.0.0"
