"""
Financial Assistant - Source Package

A small assistant that ingests transaction CSVs, answers questions
about them and estimates Indian income tax.

DESIGN PRINCIPLES:
1. AI translates → Deterministic engine computes → AI phrases the answer
2. Fail early, fail visibly (structured error results, never crashes)
3. No silent corrections of financial data
4. Every tool invocation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Financial Assistant Team"
