from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


@dataclass
class PlotParams:
    title: str
    output_path: Optional[Path] = None
    figsize: Tuple[float, float] = field(default=(10.0, 7.0))
    dpi: int = 160
    show: bool = False
