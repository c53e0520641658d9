"""
Route registration for the playback control API.

Responsibilities:
- Define HTTP control endpoints (files, upload, play, stop, status)
- Wire observer WebSockets to the StatusNotifier
- Map playback errors to HTTP responses
- Pull dependencies from app.state
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from fastapi import FastAPI, File, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from observability.logger import log_event
from playback.errors import (
    DecodeError,
    PlaybackError,
    SourceNotFound,
    StartSuperseded,
    TransportError,
)
from playback.manager import PlaybackSessionManager
from services.source_store import SourceStore
from session.status_notifier import (
    FILES_UPDATED,
    ObserverDropped,
    ObserverHandle,
    StatusNotifier,
)


_ERROR_STATUS: dict[type[PlaybackError], int] = {
    SourceNotFound: 404,
    DecodeError: 422,
    TransportError: 502,
    StartSuperseded: 409,
}


class PlayRequest(BaseModel):
    fileId: str | None = None


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    store: SourceStore = app.state.store
    notifier: StatusNotifier = app.state.notifier
    playback: PlaybackSessionManager = app.state.playback

    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.get("/api/files")
    async def list_files() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        return {"files": [entry.to_dict() for entry in store.list_sources()]}

    @app.post("/api/upload-audio")
    async def upload_audio( # pyright: ignore[reportUnusedFunction]
        file: UploadFile | None = File(None),
    ) -> Any:
        if file is None or not file.filename:
            return JSONResponse({"error": "no file uploaded"}, status_code=400)

        data = await file.read()
        entry = await asyncio.to_thread(store.save_upload, file.filename, data)
        log_event({
            "event_type": "SOURCE_UPLOADED",
            "source_ref": entry.id,
            "bytes": len(data),
        })
        notifier.broadcast(FILES_UPDATED)
        return entry.to_dict()

    @app.post("/api/play")
    async def play(payload: PlayRequest | None = None) -> Any: # pyright: ignore[reportUnusedFunction]
        file_id = payload.fileId if payload is not None else None
        if not file_id:
            return JSONResponse({"error": "fileId required"}, status_code=400)

        try:
            session_id = await playback.start(file_id)
        except PlaybackError as exc:
            log_event({
                "event_type": "PLAY_REJECTED",
                "source_ref": file_id,
                "code": exc.code,
                "message": str(exc),
            })
            return JSONResponse(
                {"error": str(exc), "code": exc.code},
                status_code=_ERROR_STATUS.get(type(exc), 500),
            )

        return {"accepted": True, "sessionId": session_id}

    @app.post("/api/pause")
    @app.post("/api/stop")
    async def stop() -> dict[str, bool]: # pyright: ignore[reportUnusedFunction]
        await playback.stop()
        return {"accepted": True}

    @app.get("/api/stream-status")
    async def stream_status() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        status = playback.status().to_dict()
        status["currentFileId"] = status["currentFile"]
        return status

    @app.websocket("/ws")
    @app.websocket("/")
    async def status_socket(ws: WebSocket) -> None: # pyright: ignore[reportUnusedFunction]
        await ws.accept()
        handle = notifier.subscribe()

        receiver = asyncio.create_task(_drain_inbound(ws))
        sender = asyncio.create_task(_pump_observer(ws, handle))
        try:
            done, pending = await asyncio.wait(
                {receiver, sender},
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

            for task in done:
                exc = task.exception()
                if exc is not None and not isinstance(exc, WebSocketDisconnect):
                    log_event({
                        "event_type": "WS_FATAL_ERROR",
                        "observer_id": handle.observer_id,
                        "exception": type(exc).__name__,
                        "message": str(exc),
                    })
        finally:
            notifier.unsubscribe(handle)


async def _drain_inbound(ws: WebSocket) -> None:
    """Observers are read-only; wait for the client to go away."""
    while True:
        msg = await ws.receive()
        if msg["type"] == "websocket.disconnect":
            return


async def _pump_observer(ws: WebSocket, handle: ObserverHandle) -> None:
    """Forward queued notifier messages to the socket in FIFO order."""
    while True:
        try:
            msg = await handle.next_message()
        except ObserverDropped:
            await ws.close(code=1013)
            return
        await ws.send_text(json.dumps(msg))
