"""Core evaluation utilities.

Responsibilities:
  - Provide the per-obligation evaluator and the per-pass orchestrator.
  - Must not read storage directly; consumes snapshots and notification lists.
"""
