"""Services layer for AudioGuard."""

from .quality_monitor import QualityMonitor
from .analysis_service import AnalysisService, AnalysisResult

__all__ = ['QualityMonitor', 'AnalysisService', 'AnalysisResult']
