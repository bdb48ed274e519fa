from typing import Optional
import uvicorn


def run(
    app_path: str,
    port: int,
    *,
    host: str = "0.0.0.0",
    log_level: str = "info",
    access_log: bool = False,
    factory: bool = False,
    log_config: Optional[dict] = None,
) -> None:
    """Serve *app_path* (``module:attr``) with uvicorn; JSON logs come from core_logging."""
    uvicorn.run(
        app_path,
        host=host,
        port=port,
        log_level=log_level,
        access_log=access_log,
        factory=factory,
        log_config=log_config,
    )

__all__ = ["run"]
