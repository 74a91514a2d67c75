"""
Apps package - FastAPI services.

- secrets_api: REST facade over AWS Secrets Manager with in-memory caching
"""
