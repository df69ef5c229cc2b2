"""Alexandria Client - Services Package

This package contains the transport layer:
- HTTP request executor and error taxonomy
"""
