"""
Infrastructure services: model transport, retry/fallback and response parsing.
"""
