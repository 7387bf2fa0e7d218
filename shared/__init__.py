"""
Shared building blocks for the schedule services.
"""
