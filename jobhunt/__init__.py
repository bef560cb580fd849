from .errors import GatewayError
from .gateway import AIGateway
from .models import JobListing, JobMatchAnalysis, ResumeAnalysis, SearchFilters
from .session import Operation, Session, View

__all__ = [
    "AIGateway", "GatewayError", "JobListing", "JobMatchAnalysis",
    "ResumeAnalysis", "SearchFilters", "Operation", "Session", "View",
]
