from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "DSPEngine",
]

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .engine import DSPEngine as DSPEngine


# Lazy import so `iqdsp.dsp` submodules load without the engine facade
def __getattr__(name: str) -> Any:
    if name == "DSPEngine":
        from .engine import DSPEngine

        return DSPEngine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
