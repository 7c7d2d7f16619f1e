import logging
import time

import cv2
import numpy as np
from flask import Flask, jsonify, request
from flask_socketio import SocketIO, emit

import config
from services.liveness_service import LivenessService
from services.scheduler_service import FrameScheduler

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SECRET_KEY"] = config.SECRET_KEY

socketio = SocketIO(
    app,
    cors_allowed_origins="*",
    async_mode="threading"
)

PORT = config.FLASK_PORT

live_service = LivenessService(
    mirror=config.MIRROR_FRAMES,
    timeout_seconds=config.LIVENESS_TIMEOUT_SECONDS,
)

SESSIONS = {}
TTL_SECONDS = config.SESSION_TTL_SECONDS


def instruction_for(result, hand_seen: bool):
    if result.fallback_triggered:
        return "❌ Liveness not detected. Please try again"
    if result.liveness_confirmed:
        return "✅ Liveness Confirmed"
    if not hand_seen:
        return "Show your hand to the camera ✋"
    return "Blink a few times or nod your head ⬆️⬇️"


def status_for(result):
    if result.fallback_triggered:
        return "FAILED"
    if result.liveness_confirmed:
        return "PASSED"
    return "IN_PROGRESS"


def decode_jpeg_to_bgr(jpeg_bytes: bytes):
    arr = np.frombuffer(jpeg_bytes, dtype=np.uint8)
    return cv2.imdecode(arr, cv2.IMREAD_COLOR)


def build_update(result, hand_seen=False):
    payload = result.to_dict()
    payload["status"] = status_for(result)
    payload["instruction"] = instruction_for(result, hand_seen)
    return payload


# --------------------------------------------------

def _on_timeout(sid):
    def notify(session):
        logger.info("session %s timed out", sid)
        socketio.emit("server_update", build_update(session.result()), to=sid)
    return notify


def _frame_handler(sid, sess):
    def handle(frame):
        face, hand = live_service.extract(frame)
        result = sess["session"].process_frame(face, hand)
        if result.liveness_confirmed and not sess["passed"]:
            sess["passed"] = True
            logger.info("session %s passed after %d frames", sid, sess["session"].frames_seen)
        socketio.emit("server_update", build_update(result, hand is not None), to=sid)
    return handle


def _start_session(sid):
    old = SESSIONS.pop(sid, None)
    if old:
        old["session"].close()

    session = live_service.create_session(on_timeout=_on_timeout(sid))
    sess = {
        "session": session,
        "last_seen": time.time(),
        "passed": False,
    }
    sess["scheduler"] = FrameScheduler(_frame_handler(sid, sess))
    SESSIONS[sid] = sess

    session.start(schedule=True)
    return sess


def _end_session(sid):
    sess = SESSIONS.pop(sid, None)
    if sess:
        sess["session"].close()
    return sess


# --------------------------------------------------

@app.get("/health")
def health():
    return jsonify({"ok": True, "port": PORT, "sessions": len(SESSIONS)})


@socketio.on("connect")
def ws_connect():
    emit("server_update", {
        "status": "IDLE",
        "instruction": "Connected ✅ Click Start"
    })


@socketio.on("liveness_start")
def ws_start():
    sid = request.sid
    sess = _start_session(sid)
    logger.info("session %s started", sid)
    emit("server_update", build_update(sess["session"].result()))


@socketio.on("liveness_reset")
def ws_reset():
    # "try again" after a timeout, same as a fresh start
    sid = request.sid
    sess = _start_session(sid)
    logger.info("session %s reset", sid)
    emit("server_update", build_update(sess["session"].result()))


@socketio.on("liveness_frame")
def ws_frame(jpeg_bytes):
    sid = request.sid
    sess = SESSIONS.get(sid)
    if not sess:
        emit("server_update", {"status": "FAILED", "error": "session_missing"})
        return

    now = time.time()
    if now - sess["last_seen"] > TTL_SECONDS:
        _end_session(sid)
        emit("server_update", {"status": "FAILED", "error": "session_expired"})
        return
    sess["last_seen"] = now

    if isinstance(jpeg_bytes, bytearray):
        jpeg_bytes = bytes(jpeg_bytes)

    frame = decode_jpeg_to_bgr(jpeg_bytes)
    if frame is None:
        logger.warning("session %s sent an undecodable frame", sid)
        emit("server_update", {"status": "IN_PROGRESS", "error": "bad_frame"})
        return

    sess["scheduler"].submit(frame)


@socketio.on("liveness_finish")
def ws_finish():
    sid = request.sid
    sess = _end_session(sid)
    if not sess:
        emit("server_update", {"status": "FAILED", "error": "session_missing"})
        return

    result = sess["session"].result()
    if sess["passed"]:
        emit("server_update", {"status": "PASSED", "instruction": "✅ Liveness PASSED"})
    else:
        emit("server_update", {
            "status": "FAILED",
            "instruction": "❌ Liveness FAILED",
            "meta": result.to_dict(),
        })
    scheduler = sess["scheduler"]
    logger.info(
        "session %s finished (passed=%s, frames=%d, dropped=%d)",
        sid, sess["passed"], scheduler.processed, scheduler.dropped,
    )


@socketio.on("disconnect")
def ws_disconnect(reason=None):
    _end_session(request.sid)


if __name__ == "__main__":
    socketio.run(app, host=config.FLASK_HOST, port=PORT, debug=False)
