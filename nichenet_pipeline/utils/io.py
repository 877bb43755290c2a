"""Input/output helpers."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Dict, Iterable, Sequence
from urllib.request import Request, urlopen

import pandas as pd
import pyreadr

from .logging import get_logger

LOGGER = get_logger(__name__)


def ensure_dirs(paths: Iterable[Path]) -> None:
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def load_json(path: Path) -> Dict:
    return json.loads(path.read_text(encoding="utf-8"))


def _download_with_ua(url: str, dest: Path) -> None:
    req = Request(url, headers={"User-Agent": "Mozilla/5.0"})
    with urlopen(req, timeout=300) as r, open(dest, "wb") as f:
        shutil.copyfileobj(r, f)


def fetch_file(filename: str, base_urls: Sequence[str], dest_dir: Path, *, overwrite: bool = False) -> Path:
    """Download ``filename`` from the first mirror that serves it.

    Existing files are reused unless ``overwrite`` is set. The last download
    error is re-raised when every mirror fails.
    """
    dest = dest_dir / filename
    if dest.exists() and not overwrite:
        LOGGER.info("%s already exists, skipping download", dest)
        return dest
    dest.parent.mkdir(parents=True, exist_ok=True)
    last_err: Exception | None = None
    for base in base_urls:
        url = f"{base.rstrip('/')}/{filename}"
        tmp = dest.with_suffix(dest.suffix + ".part")
        try:
            LOGGER.info("Downloading %s → %s", url, dest)
            _download_with_ua(url, tmp)
            tmp.replace(dest)
            return dest
        except OSError as exc:
            LOGGER.warning("Failed %s: %s", url, exc)
            tmp.unlink(missing_ok=True)
            last_err = exc
    if last_err is None:
        raise ValueError("No base URLs configured for network download")
    raise last_err


def read_table(path: Path, *, index_col: int | None = None) -> pd.DataFrame:
    """Read a tabular reference file (.rds, .csv, .tsv, optionally gzipped)."""
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")
    suffixes = [s.lower() for s in path.suffixes if s.lower() != ".gz"]
    kind = suffixes[-1] if suffixes else ""
    if kind == ".rds":
        result = pyreadr.read_r(path)
        df = next(iter(result.values()))
        # R matrices keep their rownames; plain data frames need the index column promoted.
        if index_col is not None and isinstance(df.index, pd.RangeIndex):
            df = df.set_index(df.columns[index_col])
        return df
    if kind in (".tsv", ".txt"):
        return pd.read_table(path, index_col=index_col)
    if kind == ".csv":
        return pd.read_csv(path, index_col=index_col)
    raise ValueError(f"Unsupported table format for {path}")
