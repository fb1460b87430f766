from __future__ import annotations

from hcontrib.task import Context
from hcontrib.task import Config
from hcontrib.task import Result
from hcontrib.task import Buildable
from hcontrib.task import execute
from hcontrib.errors import TaskError

__all__ = ("Context", "Config", "Result", "Buildable", "execute", "TaskError")
