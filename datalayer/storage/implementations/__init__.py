"""
Storage Implementations

This module contains concrete implementations of the storage interface.
"""

from .s3_client import S3Client
from .oss_client import OSSClient

__all__ = [
    'S3Client',
    'OSSClient',
]
