"""
oss-storage - object storage adapter for file uploads.

This package contains:
- core: Framework-agnostic models, errors and URL building
- infrastructure: Bucket clients (boto3, in-memory mock) and connections
- storage: The store/retrieve adapter and remote file handles
- config: Settings and logging setup
"""

__version__ = "0.1.0"
