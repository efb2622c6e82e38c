"""
Core Services
Presentation services for the event log
"""
