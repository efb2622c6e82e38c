"""
Data layer - SQLAlchemy models for the hackerspace database
"""
