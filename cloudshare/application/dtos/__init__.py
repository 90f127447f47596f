"""DTOs passed between the HTTP layer and use cases."""

from cloudshare.application.dtos.transfer import (
    DownloadResult,
    IngestedFile,
    SweepResult,
)

__all__ = ["DownloadResult", "IngestedFile", "SweepResult"]
