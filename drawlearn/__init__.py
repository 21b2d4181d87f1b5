"""
drawlearn: adaptive learning engine for a children's vocabulary app.

Packages:
- core: shared records, enums and errors
- adaptive: performance aggregation, stage/difficulty/hint policies,
  challenge selection
- study: spaced repetition, catalog, stores, progress, telemetry and the
  LearningEngine orchestrator
- cli: developer CLI for exploring the engine
"""

__version__ = "0.3.0"
