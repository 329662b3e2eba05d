"""buildsync — mirrors CI/CD pipeline runs into PipelineActivity resources."""

__version__ = "0.1.0"

from buildsync.models.activity import PipelineActivity
from buildsync.services.reconciler import reconcile

__all__ = ["PipelineActivity", "reconcile", "__version__"]
