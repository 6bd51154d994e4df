"""
Core helpers shared across the signin form.

- configuration (environment variables, database target, listen port)
- logging setup

Routers and services read configuration through ``get_settings`` instead of
touching ``os.environ`` directly.
"""
