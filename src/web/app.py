"""FastAPI service for files, music, notes, and the CopyAnywhere relay."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import (
    Depends,
    FastAPI,
    File,
    HTTPException,
    Request,
    Response,
    UploadFile,
    WebSocket,
)
from fastapi.responses import FileResponse, JSONResponse

from src.files.schema import FileInfo, UploadResponse
from src.files.storage import FileStore, InvalidFileNameError, media_type_for
from src.notes.schema import Folder, FolderCreate, Note, NoteCreate, NoteUpdate
from src.notes.store import (
    DuplicateFolderError,
    FolderNotFoundError,
    NoteNotFoundError,
    NoteStore,
)
from src.relay.ws import RelayService
from src.web.auth import (
    SESSION_COOKIE,
    AuthScope,
    LoginRequest,
    PasswordGate,
    require_auth,
    require_music_auth,
)
from src.web.config import AppConfig, parse_args

LOGGER = logging.getLogger(__name__)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(SESSION_COOKIE, token, httponly=True, samesite="lax")


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the ShareHub FastAPI app."""
    cfg = config or AppConfig()
    files = FileStore(cfg.upload_dir)
    notes = NoteStore.from_sqlite_path(cfg.database_path)
    gate = PasswordGate(cfg.password, cfg.effective_music_password)
    relay = RelayService(
        prefix=cfg.relay_prefix,
        max_session_name_length=cfg.max_session_name_length,
    )

    app = FastAPI(title="ShareHub API", version="0.1.0")
    app.state.config = cfg
    app.state.files = files
    app.state.notes = notes
    app.state.auth = gate
    app.state.relay = relay

    def _resolve_or_404(filename: str) -> Path:
        try:
            return files.resolve(filename)
        except (FileNotFoundError, InvalidFileNameError) as exc:
            raise HTTPException(status_code=404, detail="File not found") from exc

    def _login(request: Request, body: LoginRequest, scope: AuthScope) -> str | None:
        return gate.login(body.password, scope, token=request.cookies.get(SESSION_COOKIE))

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/auth/login")
    def login(request: Request, body: LoginRequest) -> JSONResponse:
        token = _login(request, body, "files")
        if token is None:
            LOGGER.warning("Rejected login attempt")
            return JSONResponse(
                status_code=401,
                content={"success": False, "message": "Invalid password"},
            )
        response = JSONResponse(content={"success": True})
        _set_session_cookie(response, token)
        return response

    @app.post("/api/auth/music/login")
    def music_login(request: Request, body: LoginRequest) -> JSONResponse:
        token = _login(request, body, "music")
        response = JSONResponse(content={"success": token is not None})
        if token is not None:
            _set_session_cookie(response, token)
        return response

    @app.post("/api/auth/logout")
    def logout(request: Request) -> JSONResponse:
        gate.logout(request.cookies.get(SESSION_COOKIE))
        response = JSONResponse(content={"success": True})
        response.delete_cookie(SESSION_COOKIE)
        return response

    @app.get("/api/auth-status")
    def auth_status(request: Request) -> dict[str, bool]:
        token = request.cookies.get(SESSION_COOKIE)
        return {
            "isAuthenticated": gate.is_authenticated(token, "files"),
            "isMusicAuthenticated": gate.is_authenticated(token, "music"),
        }

    @app.post("/api/upload", response_model=UploadResponse)
    def upload(file: UploadFile | None = File(default=None)) -> UploadResponse:
        if file is None or not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")
        try:
            stored = files.save(file.filename, file.file)
        except InvalidFileNameError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return UploadResponse(filename=stored.name)

    @app.get("/api/files", response_model=list[FileInfo], dependencies=[Depends(require_auth)])
    def list_files() -> list[FileInfo]:
        return files.list_files()

    @app.get("/api/download/{filename}")
    def download(filename: str) -> FileResponse:
        return FileResponse(_resolve_or_404(filename), filename=filename)

    @app.get("/api/preview/{filename}")
    def preview(filename: str) -> FileResponse:
        path = _resolve_or_404(filename)
        return FileResponse(path, media_type=media_type_for(filename))

    @app.get("/api/music", response_model=list[FileInfo], dependencies=[Depends(require_music_auth)])
    def list_music() -> list[FileInfo]:
        return files.list_audio()

    @app.get("/api/music/{filename}", dependencies=[Depends(require_music_auth)])
    def stream_music(filename: str) -> FileResponse:
        path = _resolve_or_404(filename)
        return FileResponse(path, media_type=media_type_for(filename))

    @app.post("/api/notes", response_model=Note)
    def create_note(payload: NoteCreate) -> Note:
        try:
            return notes.create_note(payload)
        except FolderNotFoundError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @app.get("/api/notes", response_model=list[Note], dependencies=[Depends(require_auth)])
    def list_notes(folder_id: int | None = None) -> list[Note]:
        return notes.list_notes(folder_id=folder_id)

    @app.patch("/api/notes/{note_id}", response_model=Note, dependencies=[Depends(require_auth)])
    def update_note(note_id: int, payload: NoteUpdate) -> Note:
        try:
            return notes.update_note(note_id, payload)
        except NoteNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except FolderNotFoundError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

    @app.delete("/api/notes/{note_id}", dependencies=[Depends(require_auth)])
    def delete_note(note_id: int) -> dict[str, bool]:
        try:
            notes.delete_note(note_id)
        except NoteNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"success": True}

    @app.get("/api/folders", response_model=list[Folder], dependencies=[Depends(require_auth)])
    def list_folders() -> list[Folder]:
        return notes.list_folders()

    @app.post("/api/folders", response_model=Folder, dependencies=[Depends(require_auth)])
    def create_folder(payload: FolderCreate) -> Folder:
        try:
            return notes.create_folder(payload)
        except DuplicateFolderError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    @app.delete("/api/folders/{folder_id}", dependencies=[Depends(require_auth)])
    def delete_folder(folder_id: int) -> dict[str, bool]:
        try:
            notes.delete_folder(folder_id)
        except FolderNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"success": True}

    @app.get("/api/ws-sessions")
    def relay_sessions() -> dict[str, int]:
        return relay.sessions()

    @app.websocket(relay.router.prefix + "/{session_path:path}")
    async def relay_socket(socket: WebSocket, session_path: str) -> None:
        await relay.serve(socket, session_path)

    return app


def main() -> None:
    """Run the ShareHub API with uvicorn."""
    import uvicorn

    cfg = parse_args()
    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(cfg)
    LOGGER.info("Starting ShareHub on %s:%d", cfg.host, cfg.port)
    uvicorn.run(app, host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
