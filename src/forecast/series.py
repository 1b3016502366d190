# file: src/forecast/series.py
"""
Named float series with readers/writer locking.

Forecasting code only needs ordered float storage with a name, so values live
in a numpy float64 array. Readers take the shared lock for the duration of a
computation; writes take the exclusive lock.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

import numpy as np
import pandas as pd


class ReadWriteLock:
    """Many concurrent readers or one writer; queued writers block new readers"""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting > 0:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers > 0:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()


class Series:
    """Ordered, named sequence of float64 observations"""

    def __init__(self, name: str, values: Optional[Iterable[float]] = None):
        self._name = name
        if values is None:
            values = []
        self._values = np.asarray(list(values) if not isinstance(values, np.ndarray) else values,
                                  dtype=np.float64).copy()
        if self._values.ndim != 1:
            raise ValueError(f"Series {name!r} must be one-dimensional, got shape {self._values.shape}")
        self._lock = ReadWriteLock()

    @classmethod
    def from_list(cls, name: str, values: Iterable[float]) -> "Series":
        """Build a new named series from any iterable of numbers"""
        return cls(name, values)

    @classmethod
    def from_pandas(cls, series: pd.Series, name: Optional[str] = None) -> "Series":
        """Wrap a pandas Series (index is discarded, order is kept)"""
        label = name if name is not None else (str(series.name) if series.name is not None else "Series")
        return cls(label, pd.to_numeric(series, errors="raise").to_numpy(dtype=np.float64))

    @property
    def name(self) -> str:
        return self._name

    @property
    def values(self) -> np.ndarray:
        """Copy of the underlying values"""
        return self._values.copy()

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, idx: int) -> float:
        return float(self._values[idx])

    def __setitem__(self, idx: int, value: float) -> None:
        with self.exclusive():
            self._values[idx] = value

    def __iter__(self) -> Iterator[float]:
        return iter(self._values.tolist())

    def __repr__(self) -> str:
        return f"Series(name={self._name!r}, n={len(self._values)})"

    def slice(self, start: int, end: int, name: Optional[str] = None) -> "Series":
        """New series holding rows start..end inclusive"""
        return Series(name or self._name, self._values[start:end + 1])

    def to_pandas(self) -> pd.Series:
        return pd.Series(self._values.copy(), name=self._name, dtype="float64")

    def view(self) -> np.ndarray:
        """Read-only view for use while the shared lock is held"""
        out = self._values.view()
        out.flags.writeable = False
        return out

    @contextmanager
    def shared(self) -> Iterator["Series"]:
        """Hold the read lock for the duration of the block"""
        self._lock.acquire_read()
        try:
            yield self
        finally:
            self._lock.release_read()

    @contextmanager
    def exclusive(self) -> Iterator["Series"]:
        """Hold the write lock for the duration of the block"""
        self._lock.acquire_write()
        try:
            yield self
        finally:
            self._lock.release_write()


def as_series(data, name: str = "Series") -> Series:
    """Coerce arrays, lists and pandas Series into a Series"""
    if isinstance(data, Series):
        return data
    if isinstance(data, pd.Series):
        return Series.from_pandas(data, name=None if data.name is not None else name)
    return Series(name, data)
