"""Application staging for the lifecycle builder."""

from .errors import StagingError
from .models import StagingRequest, StagingResult
from .orchestrator import Stager

__all__ = ["Stager", "StagingError", "StagingRequest", "StagingResult"]
