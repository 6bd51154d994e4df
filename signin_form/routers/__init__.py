"""
FastAPI routers.

Each module exposes an APIRouter included by the application in app.py.
"""
