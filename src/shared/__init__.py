"""
Shared utilities for TurboTest components.
"""
