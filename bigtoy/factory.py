"""
Factory for creating service instances and the capture flow.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from bigtoy.constants import CONNECT_TIMEOUT
from bigtoy.flow import CaptureFlow
from bigtoy.pipeline import AnalysisPipeline
from bigtoy.services.idea_client import IdeaStreamClient
from bigtoy.services.upload_service import UploadService
from bigtoy.utils.config import Config, config


def build_flow(http_client: httpx.AsyncClient, settings: Config = config) -> CaptureFlow:
    """
    Wire the services around a shared HTTP client.

    Args:
        http_client: Async HTTP client used for uploads and analysis
        settings: Configuration to read endpoints and budgets from

    Returns:
        CaptureFlow instance
    """
    upload_service = UploadService(
        http_client,
        settings.cloudinary_cloud_name,
        settings.cloudinary_upload_preset,
    )
    idea_client = IdeaStreamClient(http_client, settings.idea_endpoint_url)
    pipeline = AnalysisPipeline(idea_client, timeout=settings.analysis_timeout)
    return CaptureFlow(upload_service, pipeline, language=settings.default_language)


@asynccontextmanager
async def create_flow(settings: Config = config) -> AsyncIterator[CaptureFlow]:
    """
    Create a flow together with the HTTP client it owns.

    The client is closed, and any live session cancelled, on exit.
    """
    timeout = httpx.Timeout(settings.upload_timeout, connect=CONNECT_TIMEOUT)
    async with httpx.AsyncClient(timeout=timeout) as http_client:
        flow = build_flow(http_client, settings)
        try:
            yield flow
        finally:
            flow.pipeline.cancel()
