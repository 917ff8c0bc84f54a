from loganon.engine.engine import Engine, build_engine
from loganon.engine.exceptions import ConstructionError, EngineError, ProcessingError
from loganon.engine.stats import Stats

__all__ = [
    "ConstructionError",
    "Engine",
    "EngineError",
    "ProcessingError",
    "Stats",
    "build_engine",
]
