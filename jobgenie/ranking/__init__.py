"""Ranking: heuristic match scoring and final ordering."""

from jobgenie.ranking.match_ranker import missing_skills, rank_jobs, score_job

__all__ = ["score_job", "rank_jobs", "missing_skills"]
