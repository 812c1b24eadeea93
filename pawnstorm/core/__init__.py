"""Core engine components: board adapter, evaluator, search, history and autoplay."""

from .board import ChessBoard, MoveRecord
from .evaluator import Evaluator
from .search import SearchEngine, SearchResult, SearchStats
from .history import HistoryEntry, HistoryStack
from .autoplay import AutoplayController, AutoplayState, AutoplayUpdate
