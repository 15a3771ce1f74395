"""askdb - answer chat messages from a relational database."""

from askdb.app import AppContext
from askdb.pipeline import Pipeline, PipelineRun
from askdb.session import ConnectionState, SessionManager

__version__ = "0.1.0"

__all__ = ["AppContext", "ConnectionState", "Pipeline", "PipelineRun", "SessionManager"]
