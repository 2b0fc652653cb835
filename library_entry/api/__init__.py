"""
HTTP API for the library entry service.
"""
