"""Secrets API service: HTTP facade over the caching secret retriever."""
