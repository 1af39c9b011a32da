"""
errorscope - source analysis and remediation

Pluggable analyzers find syntax, runtime, configuration and security problems
in a source tree. A knowledge base of error patterns turns each finding into
ranked fixes, prevention strategies work at the category level, and a metrics
analyzer tracks how errors come and go over time.
"""

__version__ = "0.1.0"

from .analysis import AnalysisEngine
from .api import ErrorScope
from .config import AnalysisConfig, load_config
from .formatters import ReportGenerator, ReportOptions
from .information import ErrorInformationService
from .knowledge import KnowledgeBase
from .metrics import MetricsAnalyzer
from .models import Category, ErrorRecord, Location, ScanResult, Severity
from .monitor import MonitorOptions, RealTimeMonitor
from .prevention import PreventionStrategyService
from .resolution import ResolutionEngine

__all__ = [
    "ErrorScope",  # Facade returning JSON-ready dicts
    "AnalysisEngine",
    "AnalysisConfig",
    "load_config",
    "RealTimeMonitor",
    "MonitorOptions",
    "MetricsAnalyzer",
    "KnowledgeBase",
    "ResolutionEngine",
    "PreventionStrategyService",
    "ErrorInformationService",
    "ReportGenerator",
    "ReportOptions",
    "ErrorRecord",
    "Location",
    "ScanResult",
    "Category",
    "Severity",
]
