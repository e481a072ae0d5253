"""
Knowledge center: document ingestion and retrieval-augmented context.

Teachers upload reference documents; the pipeline extracts, chunks and embeds
them so class-analysis prompts can be enriched with relevant passages.
"""

__version__ = "0.1.0"
