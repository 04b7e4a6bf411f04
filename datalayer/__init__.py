"""
datalayer

MongoDB repositories with declarative validation, and object storage
clients for AWS S3 and Alibaba Cloud OSS.
"""

__version__ = "1.0.0"
