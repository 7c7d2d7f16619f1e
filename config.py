import os

FLASK_HOST = os.getenv("FLASK_HOST", "127.0.0.1")
FLASK_PORT = int(os.getenv("FLASK_PORT", "5002"))
SECRET_KEY = os.getenv("SECRET_KEY", "dev")

# seconds the user has to prove liveness before the fallback kicks in
LIVENESS_TIMEOUT_SECONDS = float(os.getenv("LIVENESS_TIMEOUT_SECONDS", "15"))

# idle sessions are dropped after this many seconds without a frame
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", "60"))

# front camera feeds are mirrored
MIRROR_FRAMES = os.getenv("MIRROR_FRAMES", "1") not in ("0", "false", "False")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
