"""Workflow orchestration package for blockdex.

This package contains orchestration components for indexing workflows:
- IndexLogger: Structured logging of indexing runs to a log file.
- IndexOrchestrator: Central coordinator for index and diff workflows.
"""

from blockdex.orchestration.index_logger import IndexLogger
from blockdex.orchestration.index_orchestrator import IndexOrchestrator

__all__ = ["IndexLogger", "IndexOrchestrator"]
