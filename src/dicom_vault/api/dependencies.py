"""FastAPI dependency helpers that resolve services from the app container."""

from fastapi import Request

from ..config import Settings
from ..container import ServiceContainer
from ..features.files.services import FileService
from ..features.inference.services import InferenceService
from ..features.uploads.services import ChunkReceiver, UploadPipeline


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_app_settings(request: Request) -> Settings:
    return get_container(request).settings


def get_chunk_receiver(request: Request) -> ChunkReceiver:
    return get_container(request).chunk_receiver


def get_upload_pipeline(request: Request) -> UploadPipeline:
    return get_container(request).upload_pipeline


def get_file_service(request: Request) -> FileService:
    return get_container(request).file_service


def get_inference_service(request: Request) -> InferenceService:
    return get_container(request).inference_service
