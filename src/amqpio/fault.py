"""Scoped capture of warnings and platform errors raised during blocking calls.

Low-level calls sometimes report trouble through :mod:`warnings` instead of
raising, and the caller would otherwise only see a bare failure value.
:class:`FaultCapture` records the first such report inside its ``with`` block
and raises it as :class:`~amqpio.errors.CapturedFault` once the block is done::

    with FaultCapture(errors=(OSError,)) as capture:
        result = sock_ready()

The warning hook is removed before anything escapes the block, including
exceptions the block raised on its own.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, TypeVar

from .errors import CapturedFault

T = TypeVar("T")


@dataclass(frozen=True)
class FaultRecord:
    code: int
    message: str
    filename: str | None = None
    lineno: int | None = None
    category: type[BaseException] | None = None

    @classmethod
    def from_warning(
        cls,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
    ) -> "FaultRecord":
        code = getattr(message, "errno", None) or 0
        return cls(
            code=int(code),
            message=str(message),
            filename=filename,
            lineno=lineno,
            category=category,
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FaultRecord":
        filename: str | None = None
        lineno: int | None = None
        tb = exc.__traceback__
        while tb is not None:
            filename = tb.tb_frame.f_code.co_filename
            lineno = tb.tb_lineno
            tb = tb.tb_next

        code = 0
        message = str(exc)
        if isinstance(exc, OSError):
            code = exc.errno or 0
            message = exc.strerror or message
        return cls(code=code, message=message, filename=filename, lineno=lineno, category=type(exc))


class FaultCapture:
    """Records the first warning (or listed platform error) raised in its block."""

    def __init__(self, *, errors: tuple[type[BaseException], ...] = ()) -> None:
        self._errors = errors
        self._catcher: warnings.catch_warnings | None = None
        self.record: FaultRecord | None = None

    @property
    def active(self) -> bool:
        return self._catcher is not None

    def __enter__(self) -> "FaultCapture":
        if self._catcher is not None:
            raise RuntimeError("FaultCapture is not reentrant")
        self.record = None
        self._catcher = warnings.catch_warnings()
        self._catcher.__enter__()
        warnings.simplefilter("always")
        warnings.showwarning = self._on_warning
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        catcher, self._catcher = self._catcher, None
        if catcher is not None:
            catcher.__exit__(None, None, None)

        if exc is not None:
            if not isinstance(exc, self._errors):
                return False
            if self.record is None:
                self.record = FaultRecord.from_exception(exc)

        if self.record is not None:
            raise CapturedFault(self.record) from exc
        return False

    def call(self, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        with self:
            return func(*args, **kwargs)

    def _on_warning(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: Any = None,
        line: str | None = None,
    ) -> None:
        # First fault wins; keep going so the call can return its own result
        if self.record is None:
            self.record = FaultRecord.from_warning(message, category, filename, lineno)


__all__ = ["FaultCapture", "FaultRecord"]
