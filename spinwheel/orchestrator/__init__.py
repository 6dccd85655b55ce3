"""Spin flow orchestration package."""
from .models import PresentationSink, SpinOutcome, SpinTicket
from .spin_orchestrator import SpinOrchestrator

__all__ = ["PresentationSink", "SpinOrchestrator", "SpinOutcome", "SpinTicket"]
