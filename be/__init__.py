"""Backend package: DB models, pipelines, APIs.

This package validates and persists pitch submissions, runs the enrichment
pipeline, and serves the published feed.
"""
