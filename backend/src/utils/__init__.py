"""
Utility modules for the case log application.

Datetime handling shared by services and reports, and local storage for
uploaded images.
"""
