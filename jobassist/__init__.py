"""LLM-backed resume analysis functions: job match, cover letter, resume optimization and parsing."""

__version__ = "0.1.0"
