"""File sink for encoded recordings and their session metadata."""

import json
import logging
import random
import string
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..models.session import SessionInfo

logger = logging.getLogger(__name__)

SESSION_INFO_FILE = "session_info.json"


class FileManager:
    """Stores each recording session in its own directory under ``sessions/``."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for recordings and logs
        """
        self.data_dir = Path(data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.logs_dir = self.data_dir / "logs"

        for directory in (self.data_dir, self.sessions_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    @staticmethod
    def new_session_id() -> str:
        """Return a fresh session id (YYYYMMDD_HHMMSS_xxxx) without touching disk."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=4))
        return f"{timestamp}_{suffix}"

    def create_session_directory(self, session_id: Optional[str] = None) -> str:
        """Create the directory for ``session_id`` (a new id if None) and return the id."""
        if session_id is None:
            session_id = self.new_session_id()
        self.get_session_path(session_id).mkdir(exist_ok=True)

        logger.info(f"Created session directory: {session_id}")
        return session_id

    def get_session_path(self, session_id: str) -> Path:
        return self.sessions_dir / session_id

    def save_audio_file(self, wav_bytes: bytes, session_id: str, filename: Optional[str] = None) -> str:
        """Write encoded WAV bytes into the session directory.

        Args:
            wav_bytes: Complete WAV file contents
            session_id: Session identifier
            filename: Optional file name, ``.wav`` is appended if missing

        Returns:
            Full path to the written file
        """
        if filename is None:
            filename = f"recording_{session_id}.wav"
        if not filename.endswith('.wav'):
            filename += '.wav'

        session_path = self.get_session_path(session_id)
        session_path.mkdir(exist_ok=True)
        audio_path = session_path / filename

        try:
            audio_path.write_bytes(wav_bytes)
        except OSError as e:
            logger.error(f"Error saving audio file {audio_path}: {e}")
            raise

        logger.info(f"Audio file saved: {audio_path} ({len(wav_bytes)} bytes)")
        return str(audio_path)

    def save_session_info(self, session_info: SessionInfo) -> str:
        """Save session metadata as JSON next to the recording."""
        session_path = self.get_session_path(session_info.session_id)
        session_path.mkdir(exist_ok=True)
        info_file = session_path / SESSION_INFO_FILE

        info_dict = asdict(session_info)
        info_dict['start_time'] = session_info.start_time.isoformat()

        try:
            with open(info_file, 'w', encoding='utf-8') as f:
                json.dump(info_dict, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving session info {info_file}: {e}")
            raise

        logger.info(f"Session info saved: {info_file}")
        return str(info_file)

    def load_session_info(self, session_id: str) -> Optional[SessionInfo]:
        """Load session metadata, or None if the session has none."""
        info_file = self.get_session_path(session_id) / SESSION_INFO_FILE
        if not info_file.exists():
            logger.warning(f"Session info file not found: {info_file}")
            return None

        with open(info_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        data['start_time'] = datetime.fromisoformat(data['start_time'])
        return SessionInfo(**data)

    def list_sessions(self) -> List[str]:
        """List ids of sessions that have saved metadata, oldest first."""
        sessions = sorted(
            path.name for path in self.sessions_dir.iterdir()
            if path.is_dir() and (path / SESSION_INFO_FILE).exists()
        )
        logger.debug(f"Found {len(sessions)} sessions")
        return sessions
