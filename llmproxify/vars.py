import os

from dotenv import load_dotenv

load_dotenv(override=False)

SERVICE_NAME = os.getenv("SERVICE_NAME", "llmproxify")

# JSON object of provider name -> base URL, merged over the built-in providers
API_PROVIDERS = os.getenv("API_PROVIDERS", "")

# Egress proxy for all upstream traffic (http://, https:// or socks5://)
ALL_PROXY = os.getenv("ALL_PROXY") or None

PROXY_TIMEOUT = float(os.getenv("PROXY_TIMEOUT", "300"))
STREAM_REQUEST_BODY = os.getenv("STREAM_REQUEST_BODY", "false").lower() == "true"
EXTRA_FORWARD_HEADERS = [
    h.strip().lower()
    for h in os.getenv("EXTRA_FORWARD_HEADERS", "").split(",")
    if h.strip()
]

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info").lower()

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
