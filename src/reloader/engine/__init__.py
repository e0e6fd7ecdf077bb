"""Engine: watchers, change aggregation, builds and process supervision."""

from reloader.engine.aggregator import ChangeAggregator, ChangeKind
from reloader.engine.builder import BuildCoordinator, BuildOutcome
from reloader.engine.orchestrator import run_app, run_tests
from reloader.engine.signals import Signal
from reloader.engine.supervisor import Backoff, ProcessState, ProcessSupervisor, StopOutcome
from reloader.engine.tester import TestRunner

__all__ = [
    "Backoff",
    "BuildCoordinator",
    "BuildOutcome",
    "ChangeAggregator",
    "ChangeKind",
    "ProcessState",
    "ProcessSupervisor",
    "Signal",
    "StopOutcome",
    "TestRunner",
    "run_app",
    "run_tests",
]
