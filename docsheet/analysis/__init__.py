from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.factory import AnalysisClientFactory
from docsheet.analysis.job import AnalysisJob, JobConfig
from docsheet.analysis.orchestrator import AnalysisOrchestrator

__all__ = [
    "AnalysisClientFactory",
    "AnalysisJob",
    "AnalysisOrchestrator",
    "BaseAnalysisClient",
    "JobConfig",
]
