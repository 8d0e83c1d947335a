"""Pipelines for pitch submission, feed projection, content analysis and quote backfill.

Each step is callable independently so the same code serves the HTTP handlers
and command-line jobs.
"""
