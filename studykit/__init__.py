"""StudyKit backend: content-generation orchestrator for research queries."""
