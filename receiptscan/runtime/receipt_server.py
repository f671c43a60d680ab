"""FastAPI server that runs scan sessions for remote camera clients."""

import uuid
from typing import Any

from fastapi import Body, FastAPI, HTTPException

from receiptscan.application.scan import ScanSession
from receiptscan.receipt.frame_codec import FrameDecodeError, decode_frame, encode_snapshot
from receiptscan.receipt.options import ScanOptions, ScanOptionsError
from receiptscan.runtime.logging import get_logger
from receiptscan.runtime.scan_config import load_scan_options, scan_options_from_mapping

logger = get_logger(__name__)


class SessionStore:
    """Live scan sessions keyed by id."""

    def __init__(self, default_options: ScanOptions | None = None) -> None:
        self._default_options = default_options
        self._sessions: dict[str, ScanSession] = {}

    @property
    def default_options(self) -> ScanOptions:
        if self._default_options is None:
            self._default_options = load_scan_options()
        return self._default_options

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, overrides: dict[str, Any] | None = None) -> str:
        options = scan_options_from_mapping(overrides or {}, base=self.default_options)
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = ScanSession(options)
        logger.info("Opened scan session %s", session_id)
        return session_id

    def get(self, session_id: str) -> ScanSession | None:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.reset()
        logger.info("Closed scan session %s", session_id)
        return True


def create_app(default_options: ScanOptions | None = None) -> FastAPI:
    """Build the scan server; options default to the project's scan config."""
    app = FastAPI(title="Receipt Scan Server")
    store = SessionStore(default_options)
    app.state.sessions = store

    def _session_or_404(session_id: str) -> ScanSession:
        session = store.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return session

    @app.post("/sessions")
    async def create_session(overrides: dict[str, Any] | None = Body(default=None)) -> dict[str, str]:
        """Open a scan session, optionally overriding scan options."""
        try:
            session_id = store.create(overrides)
        except ScanOptionsError as e:
            logger.error("Rejected scan options: %s", e)
            raise HTTPException(status_code=422, detail=str(e)) from e
        return {"session_id": session_id}

    @app.post("/sessions/{session_id}/frames")
    async def submit_frame(session_id: str, payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
        """Run one consensus pass and return the resulting snapshot."""
        session = _session_or_404(session_id)
        try:
            frame = decode_frame(payload)
        except FrameDecodeError as e:
            logger.error("Rejected frame for session %s: %s", session_id, e)
            raise HTTPException(status_code=422, detail=str(e)) from e

        result = session.process(frame)
        response = encode_snapshot(result.snapshot)
        response["status"] = result.status
        response["skew_degrees"] = session.skew_degrees()
        if result.progress is not None:
            response["estimated_percentage"] = result.progress.estimated_percentage
        return response

    @app.delete("/sessions/{session_id}")
    async def delete_session(session_id: str) -> dict[str, str]:
        """Reset and discard a session."""
        if not store.discard(session_id):
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return {"status": "deleted"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
