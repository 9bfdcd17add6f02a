"""Prompting package.

This package contains deterministic prompt-construction helpers used by the
backends. It does not perform randomization, HTTP transport, or persistence.
"""
