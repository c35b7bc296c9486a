"""Upload services."""

from .staging import StagingArea
from .session_guard import SessionGuard
from .chunk_receiver import ChunkReceiver
from .reassembler import Reassembler
from .remote_uploader import RemoteUploader
from .record_writer import RecordWriter
from .cleanup_policy import CleanupPolicy
from .quota_guard import QuotaGuard
from .upload_pipeline import UploadPipeline, CompleteUploadData
from .stale_session_sweeper import StaleSessionSweeper

__all__ = [
    "StagingArea",
    "SessionGuard",
    "ChunkReceiver",
    "Reassembler",
    "RemoteUploader",
    "RecordWriter",
    "CleanupPolicy",
    "QuotaGuard",
    "UploadPipeline",
    "CompleteUploadData",
    "StaleSessionSweeper",
]
