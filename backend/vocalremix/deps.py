from fastapi import Request

from vocalremix.config import Settings
from vocalremix.services.analysis import AudioAnalyzer
from vocalremix.services.orchestrator import GenerationOrchestrator
from vocalremix.storage.file_manager import FileManager
from vocalremix.storage.song_registry import SongRegistry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> SongRegistry:
    return request.app.state.registry


def get_file_manager(request: Request) -> FileManager:
    return request.app.state.file_manager


def get_analyzer(request: Request) -> AudioAnalyzer:
    return request.app.state.analyzer


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator
