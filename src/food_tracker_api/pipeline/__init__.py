"""Request pipelines: deadlines, recognition, enrichment and summaries."""
