"""Tenant-scoped request authorization, licensing guardrails and pricing."""
