"""API client wrappers for the LearnWorlds API.

Each client handles:
- Authentication
- Retry once after credential refresh
- Error normalization
"""

from .base import BaseAPIClient, RequestMetrics
from .learnworlds_client import LearnWorldsClient

__all__ = ["BaseAPIClient", "RequestMetrics", "LearnWorldsClient"]
