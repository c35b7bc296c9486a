"""Version information for dicom-vault."""

__version__ = "1.0.0"
