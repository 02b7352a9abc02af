"""FastAPI gateway for ClusterRec.

This module contains the FastAPI application, route handlers and WebSocket
stream that let viewers configure recommendation cycles and follow their
results live.
"""
