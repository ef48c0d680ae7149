"""
docsift — keyword search and deduplication across office documents.

Spreadsheets, PDFs and Word files are pushed through a concurrent
extraction pipeline; matching records are merged across the corpus.
"""

__version__ = "0.1.0"
