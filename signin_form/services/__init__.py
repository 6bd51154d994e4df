"""
Use cases for the signin form.

Routers call these services instead of talking to the repositories or the
connection manager directly.
"""
