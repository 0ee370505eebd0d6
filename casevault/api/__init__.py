"""
API routes module.

FastAPI application factory, routers, dependency injection and error
mapping for the HTTP surface.
"""
