"""DicomVault - DICOM file management API.

Chunked uploads reassembled on the server, pushed to S3-compatible object
storage and recorded in PostgreSQL, plus file browsing, deletion and
delegated AI inference over the stored studies.
"""

from .__version__ import __version__

__all__ = ["__version__"]
