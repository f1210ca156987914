"""
Background Sync Module
======================

- job_registry: in-memory job status tracking with retention
- sync_job_runner: background executor for location sync jobs
"""

from .job_registry import JobRegistry, JobStatus, SyncJob
from .sync_job_runner import SyncJobRunner

__all__ = ['JobRegistry', 'JobStatus', 'SyncJob', 'SyncJobRunner']
