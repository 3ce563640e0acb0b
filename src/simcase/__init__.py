"""Helpers for generating simulation cases with Claude.

Most callers only need :func:`simcase.llm.decode` (recover JSON from a model
reply) or :func:`simcase.llm.build_llm` (call Claude and decode in one go).
"""

__version__ = "0.1.0"
