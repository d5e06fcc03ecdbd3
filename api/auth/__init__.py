"""
Registration, login and admin checks (bcrypt + JWT).
"""
