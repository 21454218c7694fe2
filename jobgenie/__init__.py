"""JobGenie: fresh job-listing acquisition and normalization pipeline."""

from jobgenie.pipeline import JobSearchPipeline, build_default_pipeline, run_job_search

__all__ = ["JobSearchPipeline", "build_default_pipeline", "run_job_search"]
__version__ = "0.1.0"
