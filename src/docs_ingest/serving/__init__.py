"""
Serving — FastAPI application exposing repository ingestion over HTTP.

A host application (indexer, chat backend) posts a repository URL and
receives the chunk contract ready for embedding.
"""
