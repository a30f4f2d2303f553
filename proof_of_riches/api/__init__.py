"""
HTTP API for the Proof of Riches service.
"""
from .app import create_app
from .services import ProofServices, build_services, get_services

__all__ = [
    "create_app",
    "ProofServices",
    "build_services",
    "get_services",
]
