"""
Constants configuration

API settings and CORS configuration.
"""

import os

API_TITLE = "Studio Creations API"
API_DESCRIPTION = "Submit short-video creation jobs and retrieve the finished media"
API_VERSION = "1.0.0"

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")
    if origin.strip()
]

# Largest accepted base64 image payload in a creation request (decoded bytes)
MAX_IMAGE_BYTES = 10 * 1024 * 1024

__all__ = [
    "API_TITLE",
    "API_DESCRIPTION",
    "API_VERSION",
    "CORS_ORIGINS",
    "MAX_IMAGE_BYTES",
]
