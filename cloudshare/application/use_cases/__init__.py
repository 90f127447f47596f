"""Use cases: upload orchestration and download dispatch."""

from cloudshare.application.use_cases.downloads import DownloadDispatcher
from cloudshare.application.use_cases.uploads import UploadOrchestrator

__all__ = ["DownloadDispatcher", "UploadOrchestrator"]
