"""Workflow exports"""
from footy_sync.workflows.sync_workflow import FootballDataSyncWorkflow, SyncWorkflowInput

__all__ = [
    "FootballDataSyncWorkflow",
    "SyncWorkflowInput",
]
