"""
Domain layer for the hackerspace system.
Contains business rules, state machines and domain errors
separated from data persistence concerns.
"""
