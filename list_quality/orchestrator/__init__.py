"""Verification session orchestration against the external scoring webhook."""

from .service import VerificationOrchestrator

__all__ = ["VerificationOrchestrator"]
