"""
Services module - business logic for weekly work planning and PPC tracking.
"""
