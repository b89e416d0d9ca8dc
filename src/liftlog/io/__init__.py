"""Persistence: JSON serializers and the document store."""
