"""Tenant licensing: capacity guardrails and their enforcement."""

from xenon_gatekeeper.licensing.guardrails import LicenseGuardrails
from xenon_gatekeeper.licensing.service import LicenseGuardService

__all__ = ["LicenseGuardService", "LicenseGuardrails"]
