"""
Observability module for GenBridge.

Provides structured logging. Tracing and metrics are left to the
calling application.
"""
