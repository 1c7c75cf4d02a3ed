"""
Checkout API

FastAPI application, routes, dependencies and middleware.
"""
