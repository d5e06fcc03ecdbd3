"""
Mission proposal intake: form fields plus file uploads to object storage.
"""
