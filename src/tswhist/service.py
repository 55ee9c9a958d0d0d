"""FastAPI service exposing sliding histogram computation."""

from __future__ import annotations

from importlib import metadata
from typing import Any, Dict, List, Literal

from fastapi import Body, FastAPI, HTTPException
from pydantic import StrictInt

from .config import HistogramConfig, validate_config
from .pipeline import compute_histograms
from .reporting import summarize_histograms

try:
    __version__ = metadata.version("tswhist")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"


def create_app() -> FastAPI:
    app = FastAPI(title="Sliding Window Histogram API", version=__version__)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    def version() -> Dict[str, str]:
        return {"version": __version__}

    @app.post("/validate")
    def validate(config: Dict[str, Any]) -> Dict[str, Any]:
        return validate_config(config).as_dict()

    @app.post("/histogram")
    def histogram(
        samples: List[float] = Body(...),
        n_bins: StrictInt = Body(...),
        win_len: StrictInt = Body(...),
        stride: StrictInt = Body(1),
        strategy: str = Body("push"),
        normalization: Literal["none", "minmax", "self"] = Body("none"),
        one_based: bool = Body(False),
        include_summary: bool = Body(True),
    ) -> Dict[str, Any]:
        try:
            cfg = HistogramConfig(
                n_bins=n_bins,
                win_len=win_len,
                stride=stride,
                strategy=strategy,
                normalization=normalization,
                one_based=one_based,
            )
            result = compute_histograms(samples, cfg)
        except (TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc))

        payload = result.as_dict(one_based=one_based)
        if include_summary:
            payload["features"] = summarize_histograms(result.hist_matrix, result.edges)
        return payload

    return app
