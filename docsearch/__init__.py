"""
Session-scoped semantic search over uploaded documents.
"""
