from .aiohttp_client import AiohttpWorkflowEngineClient
from .fakes import EngineCall, FakeWorkflowEngineClient

__all__ = [
    "AiohttpWorkflowEngineClient",
    "EngineCall",
    "FakeWorkflowEngineClient",
]
