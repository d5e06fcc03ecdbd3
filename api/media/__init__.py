"""
Signed-link file serving for the local storage backend.
"""
