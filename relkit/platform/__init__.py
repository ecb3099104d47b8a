"""Platform layer: processes, HTTP and the run environment."""

from .environment import RunOptions, is_ci, trusted_actor
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .process import ProcessError, run

__all__ = [
    # environment
    "RunOptions",
    "is_ci",
    "trusted_actor",
    # http
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    # process
    "ProcessError",
    "run",
]
