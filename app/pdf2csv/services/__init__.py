"""
Services package for the PDF to CSV application.

Contains:
- text_extractor: PDF text extraction
- ai: OpenAI table inference and reply parsing
- table_builder: CSV artifact writer
- artifacts: artifact lookup and listing
- pipeline: conversion orchestration
"""

from .artifacts import ArtifactStore
from .pipeline import ConversionPipeline
from .table_builder import TableBuilder
from .text_extractor import TextExtractor

__all__ = ["ArtifactStore", "ConversionPipeline", "TableBuilder", "TextExtractor"]
