"""
Workflow stages.

- sync       playlist import / refresh
- reconcile  bulk availability re-check
- transfer   export / import
- library    manual scene management and views
"""
