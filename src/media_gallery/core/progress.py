"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """转换过程中的进度信息；submitted 会随遍历增长。"""

    submitted: int
    completed: int
    message: Optional[str] = None
