"""Shared utilities — console/logging setup and tracing helpers."""
