"""
Posts API package.

A FastAPI service to list, add and favorite short posts, with the store
behind a small protocol so the same service runs on Firestore, any
SQLAlchemy database, or an in-memory dict.
"""
