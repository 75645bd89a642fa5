"""Application configuration"""
import os

# Downloads directory
DOWNLOADS_DIR = os.getenv("DOWNLOADS_DIR", "downloads")

# Files older than this are removed by the sweep (one hour, not configurable)
RETENTION_SECONDS = 60 * 60

# The sweep runs as often as the retention window is long
SWEEP_INTERVAL_SECONDS = RETENTION_SECONDS

# CORS settings
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", os.getenv("API_PORT", "3000")))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Headers sent with extraction and stream requests to avoid 403 errors
HTTP_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-us,en;q=0.5',
    'Connection': 'keep-alive',
}

# Retry options passed to yt-dlp
EXTRACTOR_RETRIES = int(os.getenv("EXTRACTOR_RETRIES", "10"))
