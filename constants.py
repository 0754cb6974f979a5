import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Only validate that relay targets share the sender's room when enabled
STRICT_RELAY_TARGETS = os.getenv("STRICT_RELAY_TARGETS", "false").lower() in ("1", "true", "yes")

# Rooms pair exactly two peers for one-to-one screen sharing
ROOM_CAPACITY = 2

# Frames queued per connection before further frames to it are dropped
OUTBOUND_QUEUE_SIZE = int(os.getenv("OUTBOUND_QUEUE_SIZE", 256))
