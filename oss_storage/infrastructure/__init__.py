"""
Infrastructure layer - external service integrations.

- oss: bucket clients (boto3 against the S3-compatible API, in-memory
  mock) and the connections built on them
"""
