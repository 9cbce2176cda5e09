"""Shared FastAPI dependencies"""

from fastapi import Request

from .backend import BackendClient


def get_public_backend(request: Request) -> BackendClient:
    """Backend client without caller credentials - reads are shared between visitors"""
    return request.app.state.backend


def get_backend(request: Request) -> BackendClient:
    """Backend client forwarding the caller's Authorization and Cookie headers"""
    return request.app.state.backend.with_credentials(request.headers)
