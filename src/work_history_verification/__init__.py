"""
Work History Verification - employment-history verification workflow.

Proves that a candidate's claimed employer and tenure are real by driving
the three-step company and employee exchanges against an external
verification gateway and recording every attempt.
"""

__version__ = "0.1.0"
