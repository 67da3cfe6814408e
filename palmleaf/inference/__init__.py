from palmleaf.inference.analyzer import Analyzer
from palmleaf.inference.base import BaseAnalyzer, BaseRestorer
from palmleaf.inference.factory import InferenceClientFactory
from palmleaf.inference.restorer import Restorer

__all__ = ["Analyzer", "BaseAnalyzer", "BaseRestorer", "InferenceClientFactory", "Restorer"]
