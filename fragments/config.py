"""Configuration settings for the Fragments service."""

import os


FRAGMENTS_HOST = os.environ.get("FRAGMENTS_HOST", "0.0.0.0")

FRAGMENTS_PORT = int(os.environ.get("FRAGMENTS_PORT", "8080"))

# memory | sqlite | s3
FRAGMENTS_BACKEND = os.environ.get("FRAGMENTS_BACKEND", "memory")

DATABASE_PATH = os.environ.get("FRAGMENTS_DATABASE_PATH", "/app/data/fragments.db")

BLOB_STORAGE_PATH = os.environ.get("FRAGMENTS_BLOB_PATH", "/app/data/blobs")

S3_BUCKET_NAME = os.environ.get("FRAGMENTS_S3_BUCKET")

S3_ENDPOINT_URL = os.environ.get("FRAGMENTS_S3_ENDPOINT_URL")

AWS_REGION = os.environ.get("AWS_REGION", "us-east-1")

HTPASSWD_FILE = os.environ.get("HTPASSWD_FILE")

API_URL = os.environ.get("API_URL")

MAX_FRAGMENT_BYTES = int(os.environ.get("MAX_FRAGMENT_BYTES", str(5 * 1024 * 1024)))

SERVICE_VERSION = "0.1.0"

GITHUB_URL = os.environ.get("GITHUB_URL", "")
